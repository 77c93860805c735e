"""charrom -- character ROM bitmap font codec and glyph recognition engine.

Converts between the packed-bit ROM images used by the character generators
of 8-bit era computers and a pixel-grid glyph model, and extracts the same
glyph model from images of printed or rendered font sheets.

Bit layout is configurable per set (bit order, padding side, byte order), so
one codec covers MSB-first C64 ROMs, left-padded MC6847 dumps and LSB-first
teletext generators alike.
"""
