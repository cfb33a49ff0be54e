import argparse
import mimetypes
import os
import sys
from typing import Any, List
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from videochat.config import settings
from videochat.errors import VideoChatError
from videochat.models.analysis import AnalysisResult, ChatAnswer, SearchResult
from videochat.models.video import VideoReference
from videochat.services.session import VideoSession, build_components
from videochat.services.transcript import payload_key
from videochat.utils.logger import logger

console = Console()

def format_time(seconds: float) -> str:
    m, s = divmod(int(seconds), 60)
    h, m = divmod(m, 60)
    if h > 0:
        return f"{h:02d}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"

def valid_results(items: List[Any]) -> List[SearchResult]:
    results = []
    for item in items:
        try:
            results.append(SearchResult.model_validate(item))
        except ValidationError:
            logger.debug(f"Skipping malformed search result: {item!r}")
    return results

def render_analysis(analysis: AnalysisResult):
    console.print(Panel(analysis.summary, title="Summary", border_style="green"))

    table = Table(title="Sections", show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan", width=10)
    table.add_column("Section", style="white")
    for section in analysis.sections:
        table.add_row(format_time(section.timestamp), f"[bold]{section.title}[/bold]\n{section.description}")
        table.add_section()
    console.print(table)

def render_answer(question: str, answer: ChatAnswer):
    title = f"Q: {question}"
    if answer.timestamp:
        title += f"  [dim](at {answer.timestamp})[/dim]"
    console.print(Panel(answer.answer, title=title, border_style="yellow"))

def render_search(query: str, items: List[Any]):
    results = valid_results(items)
    if not results:
        console.print(f"[dim]No matches for \"{query}\".[/dim]")
        return
    table = Table(title=f"Visual search: {query}", show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan", width=10)
    table.add_column("Description", style="white")
    table.add_column("Confidence", justify="right")
    for r in results:
        table.add_row(format_time(r.timestamp), r.description, f"{r.confidence:.2f}")
    console.print(table)

def load_reference(args) -> VideoReference:
    if args.file:
        mime_type = mimetypes.guess_type(args.file)[0] or "video/mp4"
        with open(args.file, "rb") as f:
            return VideoReference.from_upload(f.read(), mime_type, filename=os.path.basename(args.file))
    url = args.url.strip().strip('`').strip('"').strip("'").strip()
    return VideoReference.from_url(url)

def save_outputs(session: VideoSession, output_dir: str):
    os.makedirs(output_dir, exist_ok=True)
    with open(os.path.join(output_dir, "analysis.json"), "w", encoding="utf-8") as f:
        f.write(session.analysis.model_dump_json(indent=2))
    if session.transcript is not None:
        with open(os.path.join(output_dir, "transcript.json"), "w", encoding="utf-8") as f:
            f.write(session.transcript.model_dump_json(indent=2))

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="videochat", description="Summarize, chat with and search a video")
    parser.add_argument("url", nargs="?", help="YouTube video URL")
    parser.add_argument("--url", dest="url", help="YouTube video URL")
    parser.add_argument("--file", help="Local video file to upload instead of a URL")
    parser.add_argument("--prompt", help="Custom analysis instructions")
    parser.add_argument("--ask", action="append", default=[], help="Question to ask about the video (repeatable)")
    parser.add_argument("--search", action="append", default=[], help="Visual search query (repeatable)")
    parser.add_argument("--model", help="LLM model to use")
    parser.add_argument("--no-save", action="store_true", help="Do not save output to file (default: saves to outputs/)")
    parser.add_argument("--serve", action="store_true", help="Start the HTTP API instead of analyzing a video")
    return parser

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.model:
        settings.LLM_MODEL = args.model

    if args.serve:
        from videochat.server import serve
        serve(settings)
        return 0

    if not args.url and not args.file:
        parser.print_help()
        console.print("[red]Missing video.[/red] Provide a URL or --file.")
        return 2

    try:
        reference = load_reference(args)
        session = VideoSession(build_components(settings), reference)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True
        ) as progress:
            task = progress.add_task(description="Fetching transcript & analyzing...", total=None)
            analysis = session.start(prompt=args.prompt)
            progress.update(task, completed=True)

        render_analysis(analysis)

        for question in args.ask:
            render_answer(question, session.ask(question))
        for query in args.search:
            render_search(query, session.search(query))

        if not args.no_save:
            if reference.is_upload:
                key = payload_key(reference.payload)
            else:
                key = session.transcript.video_id
            output_dir = os.path.join(settings.OUTPUT_DIR, key)
            save_outputs(session, output_dir)
            console.print(f"\n[blue]Saved output to {output_dir}[/blue]")
    except VideoChatError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        return 1
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
