import logging
import sys

if __name__ == "__main__":
    from issuemap.cli.app import main

    try:
        main()
    except Exception:
        logging.exception("Unhandled exception running issuemap")
        # exit with non-zero so scripted runs notice failure
        sys.exit(1)
