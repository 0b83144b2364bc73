"""
PEM normalization for Hosby keys

Hosby dashboards hand out keys in several shapes: full PEM blocks, single-line
base64 bodies, or bodies carrying an ``sk_``/``pk_`` prefix. All of them are
normalized into a canonical PEM block before being loaded.
"""

import re

PEM_LINE_LENGTH = 64

_KEY_PREFIX = re.compile(r'^(sk_|pk_)')
_MARKERS_AND_WHITESPACE = re.compile(r'-----(BEGIN|END) .*?-----|\s')


def format_pem(raw_key: str, block_type: str = "PRIVATE KEY") -> str:
    """
    Format a key into canonical PEM form.

    Args:
        raw_key: Key material, with or without markers, line breaks or prefix
        block_type: PEM block label (defaults to 'PRIVATE KEY')

    Returns:
        str: PEM block with 64-character body lines
    """
    body = _KEY_PREFIX.sub('', raw_key.strip())
    body = _MARKERS_AND_WHITESPACE.sub('', body)

    chunks = [body[i:i + PEM_LINE_LENGTH] for i in range(0, len(body), PEM_LINE_LENGTH)]

    return f"-----BEGIN {block_type}-----\n" + "\n".join(chunks) + f"\n-----END {block_type}-----"


def has_pem_markers(pem: str, block_type: str = "PRIVATE KEY") -> bool:
    """Check that a PEM string carries both BEGIN and END markers for ``block_type``."""
    return f"-----BEGIN {block_type}-----" in pem and f"-----END {block_type}-----" in pem
