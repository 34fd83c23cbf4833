"""Local stand-in for the Claude CLI used by integration tests.

Accepts the same flags as ``claude`` and answers with the prompt.
"""

from __future__ import annotations

import argparse
import subprocess
import sys
import time


def main(argv: list[str] | None = None) -> int:
    """Echo the prompt. Prompts starting with ``sleep:<seconds>`` or ``fail`` misbehave;
    ``spawn:<seconds>`` and ``detach:<seconds>`` also leave a sleeping child
    holding stdout, inside or outside the agent's process group."""

    parser = argparse.ArgumentParser()
    parser.add_argument("--continue", dest="continue_", action="store_true")
    parser.add_argument("--print", action="store_true")
    parser.add_argument("--max-turns", type=int, default=10)
    parser.add_argument("--append-system-prompt-file", default=None)
    parser.add_argument("--allowedTools", default="")
    parser.add_argument("prompt")
    args = parser.parse_args(argv)

    if args.prompt.startswith(("spawn:", "detach:")):
        mode, seconds = args.prompt.split(":", 1)
        subprocess.Popen(  # noqa: S603
            [sys.executable, "-c", f"import time; time.sleep({float(seconds)})"],
            start_new_session=mode == "detach",
        )
        time.sleep(float(seconds))
    if args.prompt.startswith("sleep:"):
        time.sleep(float(args.prompt.split(":", 1)[1]))
    if args.prompt.startswith("fail"):
        sys.stderr.write("echo agent failure\n")
        return 3

    sys.stdout.write(f"echo: {args.prompt}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
