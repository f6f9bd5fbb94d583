"""
Binary STL serialization.

Layout (little-endian):
    80 bytes   header (fixed text, zero padded)
    uint32     triangle count N
    N x 50     float32 normal[3], float32 vertex[3][3], uint16 attribute

The record layout is numpy-stl's Mesh.dtype, so buffers written here load
directly with ``stl.mesh.Mesh``. Output depends only on the mesh: no
timestamps or user names go into the header.
"""

import logging
import struct
from pathlib import Path
from typing import Union

import numpy as np
from stl import mesh as stl_mesh

from stl_label.config import STL_HEADER_SIZE, STL_HEADER_TEXT
from stl_label.geometry.mesh import TriangleSoup

logger = logging.getLogger(__name__)

RECORD_DTYPE = np.dtype(stl_mesh.Mesh.dtype).newbyteorder('<')


def _header(text: bytes = STL_HEADER_TEXT) -> bytes:
    # A header starting with "solid" would be mistaken for ASCII STL
    if text.lower().startswith(b"solid"):
        text = b"binary " + text
    return text[:STL_HEADER_SIZE].ljust(STL_HEADER_SIZE, b"\x00")


def serialize(soup: TriangleSoup, header: bytes = STL_HEADER_TEXT) -> bytes:
    """Encode a triangle soup as a binary STL buffer.

    An empty soup gives a valid 84-byte buffer with a zero count.
    """
    records = np.zeros(len(soup), dtype=RECORD_DTYPE)
    if len(soup):
        records['normals'] = soup.normals.astype(np.float32)
        records['vectors'] = soup.vectors.astype(np.float32)

    buffer = _header(header) + struct.pack('<I', len(soup)) + records.tobytes()
    logger.debug("Serialized %d triangles (%d bytes)", len(soup), len(buffer))
    return buffer


def write_stl(soup: TriangleSoup, path: Union[str, Path]) -> Path:
    """Serialize and write to ``path``; returns the path."""
    path = Path(path)
    path.write_bytes(serialize(soup))
    logger.info("STL saved: %s (%d triangles)", path, len(soup))
    return path
