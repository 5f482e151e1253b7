import pytest

from app.delivery.schemas.body import CollectionView, FramesView, extract_frame_data


def test_extract_only_present_fields():
    assert extract_frame_data({"x": "1", "title": "Clock"}) == {"x": 1, "title": "Clock"}


def test_extract_all_fields():
    form = {"x": "0", "y": "2", "width": "3", "height": "4", "title": " t ", "url": "https://a", "intent": "update"}
    assert extract_frame_data(form) == {"x": 0, "y": 2, "width": 3, "height": 4, "title": "t", "url": "https://a"}


def test_extract_blank_text_is_none():
    assert extract_frame_data({"url": "   "}) == {"url": None}


@pytest.mark.parametrize("value", ["", "1.5", "wide"])
def test_extract_malformed_integer(value):
    with pytest.raises(ValueError):
        extract_frame_data({"width": value})


def test_view_dump_uses_camel_case_and_drops_owner():
    view = FramesView.model_validate(
        {
            "user": {"id": "secret-id", "username": "alice"},
            "collection": {
                "id": "c1",
                "name": "Home",
                "userId": "secret-id",
                "frames": [{"id": "f1", "collectionId": "c1", "x": 0, "y": 0, "width": 1, "height": 1}],
            },
            "collections": [{"id": "c1", "name": "Home", "userId": "secret-id"}],
        }
    )
    dumped = view.model_dump(by_alias=True)
    assert dumped["user"] == {"username": "alice"}
    assert "userId" not in dumped["collection"]
    assert dumped["collections"] == [{"id": "c1", "name": "Home"}]
    assert dumped["collection"]["frames"][0]["collectionId"] == "c1"
    assert "secret-id" not in repr(dumped)


def test_collection_view_defaults_to_no_frames():
    assert CollectionView(id="c1", name="Home").frames == []
