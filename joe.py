import os
import sys
from pathlib import Path

from joe.joe_runtime import ScriptRunner

PROMPT = ">> "


# A basic input prompt; returns '' at end of input.
def prompt_input(prompt: str) -> str:
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline()


def run_script_file(file_path: str):
    """Run a Joe script file non-interactively and exit with appropriate status."""
    runner = ScriptRunner()
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    result = runner.handle_script(source)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)


def main(argv=None):
    """Run a script file when provided, otherwise start the interactive REPL."""
    argv = sys.argv[1:] if argv is None else argv
    if argv and not argv[0].startswith("-"):
        run_script_file(argv[0])
        return

    user = os.environ.get("USER") or os.environ.get("USERNAME") or "there"
    print(f"Hello {user}! This is the Joe programming language.")
    print("Please type in commands.")

    # One runner for the whole session so bindings persist between lines.
    runner = ScriptRunner()

    while True:
        raw = prompt_input(PROMPT)
        if raw == "":
            print()
            break
        line = raw.strip()
        if not line:
            continue
        if line == "exit":
            break

        result = runner.handle_script(line)
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            continue
        if result.value is not None:
            print(result.value.inspect())


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
