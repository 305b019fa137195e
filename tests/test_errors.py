from mediameta.errors import (
    ClearAndSkip,
    Incomplete,
    MediaError,
    MediaIOError,
    ParseFailed,
    ParsingFailed,
    UnrecognizedFileFormat,
)


def test_incomplete_keeps_needed_count():
    err = Incomplete(5)
    assert err.needed == 5
    assert str(err) == "need more bytes: 5"
    assert err.state is None


def test_incomplete_unknown_amount_means_one_byte():
    assert Incomplete(0).needed == 1


def test_incomplete_is_caught_as_parse_failure():
    err = Incomplete(7)
    assert isinstance(err, ParseFailed)
    assert err.needed == 7
    assert str(err) == "need more bytes: 7"


def test_incomplete_state_can_be_attached():
    err = Incomplete(3)
    err.state = ("tiff", 8)
    assert err.state == ("tiff", 8)


def test_clear_and_skip_carries_count_and_state():
    err = ClearAndSkip(10, state="header")
    assert err.count == 10
    assert err.state == "header"
    assert str(err) == "clear and skip bytes: 10"


def test_clear_and_skip_is_not_a_parse_failure():
    err = ClearAndSkip(4)
    assert isinstance(err, MediaError)
    assert not isinstance(err, ParseFailed)
    assert err.count == 4
    assert err.state is None


def test_parsing_failed_message():
    err = ParsingFailed("no exif offset in meta box")
    assert str(err) == "no exif offset in meta box"
    assert err.message == "no exif offset in meta box"
    assert err.state is None


def test_parsing_failed_is_a_media_error():
    err = ParsingFailed("boom", state=1)
    assert isinstance(err, MediaError)
    assert err.state == 1
    assert str(err) == "boom"


def test_parse_failed_prefix():
    assert str(ParseFailed("Exif not found")) == "parse failed: Exif not found"


def test_io_error_prefix():
    err = MediaIOError(OSError("disk gone"))
    assert str(err).startswith("io error: ")
    assert "disk gone" in str(err)


def test_unrecognized_file_format_message():
    assert str(UnrecognizedFileFormat()) == "unrecognized file format"