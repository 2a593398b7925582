"""Tests for binary frame construction."""

import cbor2
import pytest

from objectlog.core.checksum import digest
from objectlog.core.codec import BinaryCodec, EncodeError
from objectlog.core.log.format import Frame, encode_frame


class TestFrame:
    """Test encode_frame and Frame."""
    
    def test_frame_layout(self):
        """Test that a frame is the payload followed by its encoded checksum."""
        record = {"id": 1, "tag": "a"}
        payload = cbor2.dumps(record)
        
        frame = encode_frame(BinaryCodec(), record)
        
        assert frame.payload == payload
        assert frame.checksum == digest(payload)
        assert frame.checksum_bytes == cbor2.dumps(digest(payload))
        assert frame.serialize() == payload + cbor2.dumps(digest(payload))
    
    def test_frame_size(self):
        """Test that size matches the serialized length."""
        frame = encode_frame(BinaryCodec(), {"value": "x" * 300})
        
        assert frame.size() == len(frame.serialize())
    
    def test_no_length_prefix(self):
        """Test that the frame starts directly with the payload."""
        frame = encode_frame(BinaryCodec(), "hello")
        
        assert frame.serialize().startswith(cbor2.dumps("hello"))
    
    def test_custom_digest(self):
        """Test that the checksum function can be replaced."""
        frame = encode_frame(BinaryCodec(), [1, 2], digest=lambda payload: 7)
        
        assert frame.checksum == 7
        assert frame.checksum_bytes == cbor2.dumps(7)
    
    def test_unrepresentable_record(self):
        """Test that encoding errors propagate."""
        with pytest.raises(EncodeError):
            encode_frame(BinaryCodec(), object())
    
    def test_frame_is_immutable(self):
        """Test that frames cannot be modified after construction."""
        frame = Frame(payload=b"\x01", checksum=1, checksum_bytes=b"\x01")
        
        with pytest.raises(AttributeError):
            frame.payload = b"\x02"
