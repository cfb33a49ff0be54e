import os
from jinja2 import Environment, FileSystemLoader, StrictUndefined

PROMPTS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "prompts")

def prompt_env() -> Environment:
    return Environment(loader=FileSystemLoader(PROMPTS_DIR), undefined=StrictUndefined,
                       trim_blocks=True, lstrip_blocks=True)
