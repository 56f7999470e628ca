import pytest

from anisource.extractors.unpacker import UnpackError, detect, encode_index, unpack

PACKED_PLAYER = (
    "<script type='text/javascript'>"
    "eval(function(p,a,c,k,e,d){while(c--)if(k[c])p=p.replace(new RegExp(c.toString(a)),k[c]);return p}"
    "('0({1:[{2:\"3://4.5/6/7.8\"}]})',36,9,"
    "'jwplayer|sources|file|https|cdn|example|hls|master|m3u8'.split('|')))"
    "</script>"
)


def test_detect_packed_script():
    assert detect(PACKED_PLAYER)
    assert not detect("<script>var player = {file: 'x.m3u8'};</script>")
    assert not detect("")


def test_unpack_restores_player_setup():
    assert unpack(PACKED_PLAYER) == (
        'jwplayer({sources:[{file:"https://cdn.example/hls/master.m3u8"}]})'
    )


def test_encode_index_follows_packer_alphabet():
    assert encode_index(0, 36) == "0"
    assert encode_index(35, 36) == "z"
    assert encode_index(36, 62) == "A"
    assert encode_index(61, 62) == "Z"
    assert encode_index(62, 62) == "10"
    assert encode_index(36, 36) == "10"


def test_empty_keyword_keeps_original_word():
    packed = "eval(function(p,a,c,k,e,d){return p}('0 1',10,2,'|player'.split('|')))"
    assert unpack(packed) == "0 player"


def test_words_beyond_count_are_left_alone():
    packed = "eval(function(p,a,c,k,e,r){return p}('0 1 2',10,2,'a|b|c'.split('|')))"
    assert unpack(packed) == "a b 2"


def test_unpack_without_packed_script_raises():
    with pytest.raises(UnpackError):
        unpack("<html>nothing to see</html>")


def test_unpack_with_short_keyword_table_raises():
    packed = "eval(function(p,a,c,k,e,d){return p}('0 1 2',10,3,'a|b'.split('|')))"
    with pytest.raises(UnpackError):
        unpack(packed)
