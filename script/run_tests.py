import sys

import pytest

GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"


def main() -> int:
    """Run the unit suite with a colored summary.

    Returns:
        Process exit code.
    """
    exit_code = pytest.main(["-q", "tests/unit", *sys.argv[1:]])
    if exit_code == 0:
        print(f"{GREEN}RESULT: PASS{RESET}")
        return 0
    print(f"{RED}RESULT: FAIL{RESET}")
    return int(exit_code)


if __name__ == "__main__":
    sys.exit(main())
