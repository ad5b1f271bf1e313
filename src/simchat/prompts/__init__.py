"""Prompt management module.

Externalizes prompts to text files for easy customization.
Prompts can be overridden by placing files in the working directory.
"""

from functools import lru_cache
from pathlib import Path

from ..chat.models import AgentProfile

# Default prompts directory (package location)
_PROMPTS_DIR = Path(__file__).parent


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a prompt from file.

    Search order:
    1. Current working directory: ./prompts/{name}.txt
    2. Package prompts directory: simchat/prompts/{name}.txt

    Raises:
        FileNotFoundError: If prompt file not found in any location
    """
    filename = f"{name}.txt"

    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8")

    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def build_persona_prompt(agent: AgentProfile) -> str:
    """Render the system prompt that puts the model in character.

    Optional profile fields that are unset contribute nothing.
    """
    identity = f"You are {agent.name}, a {agent.type.lower()}"
    if agent.subject:
        identity += f" specializing in {agent.subject}"
    if agent.grade_level:
        identity += f" for {agent.grade_level} students"
    identity += "."

    details = [agent.description or ""]
    if agent.prompt:
        details.append(f"Instructions: {agent.prompt}")
    if agent.teaching_style:
        details.append(f"Style: {agent.teaching_style}")
    if agent.learning_objective:
        details.append(f"Learning Objective: {agent.learning_objective}")

    template = load_prompt("persona")
    return template.format(
        identity=identity,
        details="\n\n".join(d for d in details if d),
        name=agent.name,
    ).strip()


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "build_persona_prompt",
    "clear_cache",
    "load_prompt",
]
