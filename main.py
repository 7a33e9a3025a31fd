"""
SpectraMix - Main Entry Point

Example usage:
    python main.py combine a.wav b.wav -o combined.wav
    python main.py --config config/config.yaml transform request.json
"""

import sys

from spectramix.cli import main


if __name__ == "__main__":
    sys.exit(main())
