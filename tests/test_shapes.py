from media_api.shapes import match_data, match_first, match_flat, match_videos


def test_videos_shape_takes_precedence_over_data():
    fields = match_first({"videos": {"sd": "https://c/sd"}, "data": {"play": "https://c/play"}})
    assert fields.shape == "videos"
    assert fields.video_url == "https://c/sd"


def test_data_shape_prefers_play():
    fields = match_data({"data": {"play": "https://c/p", "wmplay": "https://c/wm"}})
    assert fields.video_url == "https://c/p"
    fields = match_data({"data": {"wmplay": "https://c/wm", "author": "not a dict"}})
    assert fields.video_url == "https://c/wm"
    assert fields.author is None


def test_non_applicable_shapes():
    assert match_videos({"data": {}}) is None
    assert match_data({"data": None}) is None
    assert match_flat({"url": ""}) is None
    assert match_first([1, 2]) is None
    assert match_first({"status": "error"}) is None


def test_wrong_container_type_yields_no_url():
    fields = match_first({"videos": ["https://c/a"]})
    assert fields.shape == "videos"
    assert fields.video_url is None


def test_empty_container_still_decides():
    fields = match_first({"videos": {}, "data": {"play": "https://c/data.mp4"}})
    assert fields.shape == "videos"
    assert fields.video_url is None
    fields = match_first({"data": [], "url": "https://c/flat.mp4"})
    assert fields.shape == "data"
    assert fields.video_url is None


def test_falsy_container_is_skipped():
    fields = match_first({"videos": 0, "data": "", "url": "https://c/flat.mp4"})
    assert fields.shape == "flat"
