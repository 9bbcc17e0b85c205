# For running the generator straight from a source checkout

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from kilosort_chanmap.cli import main

if __name__ == "__main__":
    main()
