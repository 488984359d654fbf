from __future__ import annotations

import logging
import struct
from pathlib import Path

from mutagen import MutagenError
from mutagen._riff import RiffFile
from mutagen.wave import WAVE

from .models import FileOpenError, WavInfo

logger = logging.getLogger(__name__)

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_IEEE_FLOAT = 0x0003
WAVE_FORMAT_EXTENSIBLE = 0xFFFE
SUPPORTED_FORMATS = {WAVE_FORMAT_PCM, WAVE_FORMAT_IEEE_FLOAT, WAVE_FORMAT_EXTENSIBLE}

# Offset of block_align inside the fmt chunk payload.
BLOCK_ALIGN_OFFSET = 12


def read_wav_info(path: Path) -> WavInfo:
    """Read the WAV header of ``path`` without touching the sample payload.

    mutagen parses the RIFF chunk table and the ``fmt `` chunk; the sample
    count comes from the declared size of the ``data`` chunk. Anything that
    is not uncompressed PCM (or IEEE float) with a data chunk is rejected.
    """
    try:
        with path.open("rb") as fh:
            info = WAVE(fh).info
            fh.seek(0)
            riff = RiffFile(fh)
            fmt = riff["fmt"].read()
            if "data" not in riff:
                raise FileOpenError(path, ValueError("no data chunk"))
            data_size = riff["data"].data_size
    except (MutagenError, OSError) as exc:
        raise FileOpenError(path, exc) from exc

    if info.audio_format not in SUPPORTED_FORMATS:
        raise FileOpenError(
            path, ValueError(f"unsupported format tag 0x{info.audio_format:04x}")
        )
    if info.sample_rate <= 0:
        raise FileOpenError(path, ValueError(f"invalid sample rate {info.sample_rate}"))
    if info.channels <= 0:
        raise FileOpenError(path, ValueError("file contains zero channels"))
    if info.bits_per_sample <= 0:
        raise FileOpenError(path, ValueError(f"invalid bits per sample {info.bits_per_sample}"))

    (block_align,) = struct.unpack_from("<H", fmt, BLOCK_ALIGN_OFFSET)
    if block_align == 0 or block_align % info.channels:
        raise FileOpenError(path, ValueError(f"invalid block align {block_align}"))
    bytes_per_sample = block_align // info.channels
    if info.bits_per_sample > bytes_per_sample * 8:
        raise FileOpenError(path, ValueError("sample bits exceed size of sample"))
    if data_size % bytes_per_sample:
        raise FileOpenError(
            path, ValueError("data chunk length is not a multiple of sample size")
        )

    sample_count = data_size // bytes_per_sample
    logger.debug(
        "%s: %d Hz, %d ch, %d bit, %d samples",
        path,
        info.sample_rate,
        info.channels,
        info.bits_per_sample,
        sample_count,
    )
    return WavInfo(
        path=path,
        sample_rate=info.sample_rate,
        channels=info.channels,
        bits_per_sample=info.bits_per_sample,
        sample_count=sample_count,
    )


def get_duration_ms(path: Path) -> int:
    return read_wav_info(path).duration_ms
