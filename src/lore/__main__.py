import sys

from src.lore.cli import main

# python -m src.lore search "The Way of Kings" "Brandon Sanderson"
if __name__ == "__main__":
    sys.exit(main())
