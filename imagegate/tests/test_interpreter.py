import pytest

from imagegate.core.errors import PromptNotFoundError
from imagegate.core.interpreter import decode_chunk, extract_payload
from imagegate.core.models import ImageChunk, TextChunk


def _image(url: str) -> dict:
    return {"type": "image_url", "image_url": {"url": url}}


def test_string_content_is_trimmed_into_prompt():
    payload = extract_payload([{"role": "user", "content": "  a cat on a sofa \n"}])
    assert payload.prompt == "a cat on a sofa"
    assert payload.embedded_images == ()
    assert payload.remote_images == ()


def test_latest_user_message_wins():
    messages = [
        {"role": "user", "content": "old prompt"},
        {"role": "assistant", "content": "done"},
        {"role": "user", "content": "new prompt"},
    ]
    assert extract_payload(messages).prompt == "new prompt"


def test_non_user_roles_are_ignored():
    messages = [
        {"role": "system", "content": "you draw"},
        {"role": "user", "content": "a dog"},
        {"role": "assistant", "content": "sure"},
    ]
    assert extract_payload(messages).prompt == "a dog"


def test_chunks_split_images_by_data_prefix_in_order():
    messages = [
        {
            "role": "user",
            "content": [
                _image("https://x/1.png"),
                _image("data:image/png;base64,AAA"),
                {"type": "text", "text": " make it blue "},
                _image("http://x/2.png"),
                _image("data:image/jpeg;base64,BBB"),
            ],
        }
    ]
    payload = extract_payload(messages)
    assert payload.prompt == "make it blue"
    assert payload.remote_images == ("https://x/1.png", "http://x/2.png")
    assert payload.embedded_images == ("data:image/png;base64,AAA", "data:image/jpeg;base64,BBB")


def test_last_text_chunk_overwrites_prompt():
    content = [{"type": "text", "text": "first"}, {"type": "text", "text": "second"}]
    assert extract_payload([{"role": "user", "content": content}]).prompt == "second"


def test_malformed_chunks_are_skipped():
    content = [
        "bare string",
        {"type": "text"},
        {"type": "text", "text": 42},
        {"type": "image_url"},
        {"type": "image_url", "image_url": "https://x/not-an-object.png"},
        {"type": "image_url", "image_url": {"url": None}},
        {"type": "input_audio", "input_audio": {"data": "..."}},
        {"type": "text", "text": "a fox"},
    ]
    payload = extract_payload([{"role": "user", "content": content}])
    assert payload.prompt == "a fox"
    assert payload.remote_images == ()
    assert payload.embedded_images == ()


def test_images_from_newer_image_only_turn_are_kept():
    messages = [
        {"role": "user", "content": "draw a house"},
        {"role": "user", "content": [_image("https://x/ref.png")]},
    ]
    payload = extract_payload(messages)
    assert payload.prompt == "draw a house"
    assert payload.remote_images == ("https://x/ref.png",)


def test_scan_stops_after_prompt_bearing_message():
    messages = [
        {"role": "user", "content": [_image("https://x/older.png"), {"type": "text", "text": "older"}]},
        {"role": "user", "content": [{"type": "text", "text": "newer"}, _image("https://x/newer.png")]},
    ]
    payload = extract_payload(messages)
    assert payload.prompt == "newer"
    assert payload.remote_images == ("https://x/newer.png",)


def test_blank_user_text_falls_back_to_older_turn():
    messages = [
        {"role": "user", "content": "a lighthouse"},
        {"role": "user", "content": "   "},
    ]
    assert extract_payload(messages).prompt == "a lighthouse"


@pytest.mark.parametrize(
    "messages",
    [
        [],
        [{"role": "assistant", "content": "hello"}],
        [{"role": "user", "content": [_image("https://x/1.png")]}],
        [{"role": "user", "content": None}],
        [{"role": "user", "content": "   "}],
        ["not a message"],
    ],
)
def test_missing_prompt_raises(messages):
    with pytest.raises(PromptNotFoundError):
        extract_payload(messages)


def test_decode_chunk_variants():
    assert decode_chunk({"type": "text", "text": "hi"}) == TextChunk(text="hi")
    assert decode_chunk(_image("data:image/png;base64,A")) == ImageChunk(url="data:image/png;base64,A")
    assert decode_chunk(_image("data:image/png;base64,A")).embedded is True
    assert decode_chunk(_image("https://x/1.png")).embedded is False
    assert decode_chunk({"type": "video_url", "video_url": {"url": "https://x/v.mp4"}}) is None
    assert decode_chunk(None) is None
