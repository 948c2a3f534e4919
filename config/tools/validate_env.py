# tools/validate_env.py

import sys           # for exit codes
from pprint import pprint  # for structured printing

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_env.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from env.loader import load_environment  # import our loader


def main() -> None:
    """Load and print the resolved configuration, failing fast on errors."""
    try:
        env = load_environment()
    except (FileNotFoundError, KeyError, ValueError) as e:
        print("Environment validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        sys.exit(1)                          # non-zero exit: CI will mark as failed

    print("Environment validation OK.")
    print("\nActive profile:", env.name)
    print("\nLogging:")
    pprint(env.logging)
    print("\nPathfinder:")
    pprint(env.pathfinder)
    print("\nRepositories:")
    pprint(env.repositories)


if __name__ == "__main__":
    main()
