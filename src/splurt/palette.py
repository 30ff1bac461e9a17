import numpy as np

# Tango scheme for the 16 system colours. None of them repeats a cube or ramp
# entry, so a nearest search never resolves an exact cube colour to 0-15.
ANSI_COLOURS = [
    (46, 52, 54),
    (204, 0, 0),
    (78, 154, 6),
    (196, 160, 0),
    (52, 101, 164),
    (117, 80, 123),
    (6, 152, 154),
    (211, 215, 207),
    (85, 87, 83),
    (239, 41, 41),
    (138, 226, 52),
    (252, 233, 79),
    (114, 159, 207),
    (173, 127, 168),
    (52, 226, 226),
    (238, 238, 236),
]

CUBE_START = 16
CUBE_SIZE = 6
CUBE_LEVELS = (0, 95, 135, 175, 215, 255)
GRAY_START = CUBE_START + CUBE_SIZE**3  # 232
GRAY_STEPS = 24


def cube_index(r: int, g: int, b: int) -> int:
    """Palette index of the colour cube entry at levels (r, g, b), each 0-5."""
    return CUBE_START + 36 * r + 6 * g + b


def build_palette() -> np.ndarray:
    """Build the 256-colour xterm palette as a (256, 3) uint8 array."""
    table = np.zeros((256, 3), dtype=np.uint8)
    table[:CUBE_START] = ANSI_COLOURS
    for r in range(CUBE_SIZE):
        for g in range(CUBE_SIZE):
            for b in range(CUBE_SIZE):
                table[cube_index(r, g, b)] = (CUBE_LEVELS[r], CUBE_LEVELS[g], CUBE_LEVELS[b])
    for i in range(GRAY_STEPS):
        level = 8 + 10 * i
        table[GRAY_START + i] = (level, level, level)
    table.flags.writeable = False
    return table


PALETTE = build_palette()
