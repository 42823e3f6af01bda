"""Entry point: python -m continuum <review|hook> ...

- "review": review queue commands (add/approve/reject/list/stats/clean/help)
- "hook":   host runtime lifecycle hooks (pre-edit, post-write, pre-compact,
            session-start, session-end)
"""

from __future__ import annotations

import sys


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""

    if cmd == "review":
        from continuum.review.cli import main as review_main

        review_main(sys.argv[2:])
    elif cmd == "hook":
        from continuum.hooks.runner import main as hook_main

        hook_main(sys.argv[2:])
    else:
        print("Usage: python -m continuum [review|hook] ...")
        print("  review <command>  Review queue (run 'review help' for commands)")
        print("  hook <event>      Lifecycle hook for the host runtime")
        sys.exit(1)


if __name__ == "__main__":
    main()
