import sys

from chip8emu.asm.cli import main

sys.exit(main())
