"""Core components: codecs, checksums and the log itself."""

from objectlog.core import checksum, codec, log

__all__ = ["checksum", "codec", "log"]
