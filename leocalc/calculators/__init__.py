"""
Deterministic calculation engine.

Pure Python arithmetic. Given the raw inputs of one screen, produce every
derived figure that screen shows. No I/O, no hidden state — calling twice
with the same inputs gives identical output.
"""
