"""Resolution of symbolic jump and call targets in XSM assembly."""

import re

from .layout import XSM_INSTRUCTION_SIZE

_OPERAND_SPLIT = re.compile(r"[ ,]")


class LabelError(Exception):
    """A jump or call names a label that is not defined."""

    def __init__(self, label):
        super().__init__(f'Can not resolve label "{label}".')
        self.label = label


def _strip_newline(line):
    return line.split("\n", 1)[0]


def is_label(line):
    """Tell whether *line* is a label definition (ends with a colon)."""
    return _strip_newline(line).endswith(":")


def label_name(line):
    """Return the name defined by a label line."""
    names = [part for part in _strip_newline(line).split(":") if part]
    return names[0] if names else ""


def is_charstring(text):
    """Tell whether *text* holds at least one ASCII letter."""
    if text is None:
        return False
    return any(ch.isascii() and ch.isalpha() for ch in text)


def collect_labels(lines):
    """Map each label to the relative address of the instruction it marks."""
    labels = {}
    address = 0
    for raw in lines:
        line = _strip_newline(raw)
        if not line:
            continue
        if is_label(line):
            labels[label_name(line)] = address
        else:
            address += XSM_INSTRUCTION_SIZE
    return labels


def resolve_labels(lines, base_address):
    """Return the program with labels removed and jump targets made absolute.

    Raises LabelError when a jump or call names an undefined label.
    """
    lines = [_strip_newline(line) for line in lines]
    targets = collect_labels(lines)
    resolved = []
    for line in lines:
        if not line or is_label(line):
            continue
        tokens = [tok for tok in _OPERAND_SPLIT.split(line) if tok]
        if not tokens:
            resolved.append(line)
            continue
        opcode, left, right = (tokens + [None, None])[:3]
        kind = opcode.upper()
        if kind in ("JMP", "CALL"):
            prefix, target = "", left
        elif kind in ("JZ", "JNZ"):
            prefix, target = f"{left}, ", right
        else:
            resolved.append(line)
            continue
        if not is_charstring(target):
            resolved.append(line)
            continue
        if target not in targets:
            raise LabelError(target)
        resolved.append(f"{opcode} {prefix}{targets[target] + base_address}")
    return resolved