#!/usr/bin/env python3
"""
Executable entry point for the install-qemu command.

Adds the project root to the Python path and runs `start_vm.install.main`.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from start_vm.install import main

if __name__ == "__main__":
    main()
