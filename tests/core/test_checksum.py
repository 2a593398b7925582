"""Tests for the CRC32C payload checksum."""

from objectlog.core.checksum import digest, verify


class TestChecksum:
    """Test digest and verify."""
    
    def test_known_vector(self):
        """Test the standard CRC32C check value."""
        assert digest(b"123456789") == 0xE3069283
    
    def test_empty_payload(self):
        """Test digest of empty input."""
        assert digest(b"") == 0
    
    def test_digest_is_32_bit(self):
        """Test that digests fit in an unsigned 32-bit integer."""
        for payload in (b"a", b"x" * 1000, bytes(range(256))):
            assert 0 <= digest(payload) <= 0xFFFFFFFF
    
    def test_deterministic(self):
        """Test that the same bytes always give the same digest."""
        assert digest(b"record") == digest(b"record")
    
    def test_order_sensitive(self):
        """Test that reordering bytes changes the digest."""
        assert digest(b"ab") != digest(b"ba")
    
    def test_verify(self):
        """Test verifying a payload against its stored digest."""
        payload = b"payload"
        
        assert verify(payload, digest(payload))
        assert not verify(payload + b"!", digest(payload))
    
    def test_verify_with_other_algorithm(self):
        """Test verifying with a caller-supplied digest function."""
        length = len
        
        assert verify(b"four", 4, length)
        assert not verify(b"four", digest(b"four"), length)
