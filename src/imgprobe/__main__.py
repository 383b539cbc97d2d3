"""Allow ``python -m imgprobe`` to run the CLI."""

from imgprobe.cli import main

if __name__ == "__main__":
    main()
