"""Run a gtm-setup command: python -m gtm_setup {authorize,test-connection}"""
import sys

from gtm_setup.cli import authorize_main, verify_main

COMMANDS = {
    "authorize": authorize_main,
    "test-connection": verify_main,
}


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1 or argv[0] not in COMMANDS:
        print(f"usage: python -m gtm_setup {{{','.join(COMMANDS)}}}", file=sys.stderr)
        return 2
    return COMMANDS[argv[0]]()


if __name__ == "__main__":
    sys.exit(main())
