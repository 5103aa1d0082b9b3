import json
import logging
import pathlib
import sys

from src.listing.pipeline import compose_description, compose_story
from src.listing.story import split_caption
from .errors import AgentError, ListingValidationError
from .logging_config import setup_logging

USAGE = """Usage:
  python -m src.agent describe <path/to/listing.json>
  python -m src.agent story <text | path/to/description.txt>
  python -m src.agent split-story <caption>"""


def cmd_describe(args: list[str]) -> int:
    if not args:
        print("Usage: python -m src.agent describe <path/to/listing.json>")
        return 2

    path = pathlib.Path(args[0])
    if not path.exists():
        print(f"❌ File not found: {path}")
        return 2

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"❌ Invalid JSON in {path}: {e}")
        return 2

    try:
        text = compose_description(data)
    except ListingValidationError as e:
        print("❌ Invalid listing:")
        for field, msg in e.errors.items():
            print(f"- {field}: {msg}")
        return 1
    except AgentError as e:
        # One catch for all our domain errors
        print(f"❌ Erro ao gerar descrição: {e}")
        return 1

    print(text)
    return 0


def cmd_story(args: list[str]) -> int:
    if not args:
        print("Usage: python -m src.agent story <text | path/to/description.txt>")
        return 2

    candidate = pathlib.Path(args[0])
    if len(args) == 1 and candidate.is_file():
        raw = candidate.read_text(encoding="utf-8")
    else:
        raw = " ".join(args)

    try:
        res = compose_story({"text": raw})
    except ListingValidationError as e:
        print(f"❌ {'; '.join(e.errors.values())}")
        return 1
    except AgentError as e:
        print(f"❌ Erro ao gerar texto: {e}")
        return 1

    print(f"✅ {res.caption}")
    print("📋 Clipboard:")
    print(res.clipboard)
    return 0


def cmd_split_story(args: list[str]) -> int:
    if not args:
        print("Usage: python -m src.agent split-story <caption>")
        return 2
    print(split_caption(" ".join(args)))
    return 0


COMMANDS = {
    "describe": cmd_describe,
    "story": cmd_story,
    "split-story": cmd_split_story,
}


def main():
    setup_logging()
    log = logging.getLogger("agent")

    if len(sys.argv) >= 2:
        cmd, *rest = sys.argv[1:]
        if cmd in COMMANDS:
            sys.exit(COMMANDS[cmd](rest))
        log.warning("Unknown command: %s", cmd)
        print(USAGE)
        sys.exit(2)

    print(USAGE)
    sys.exit(2)

if __name__ == "__main__":
    main()
