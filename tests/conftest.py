from typing import List, Optional

import pytest


def title_prop(text: str, name_type: str = "title") -> dict:
    return {"type": name_type, name_type: [{"plain_text": text}]}


def files_prop(*entries: dict) -> dict:
    return {"type": "files", "files": list(entries)}


def external(url: str) -> dict:
    return {"name": url.rsplit("/", 1)[-1], "type": "external", "external": {"url": url}}


def hosted(url: str) -> dict:
    return {
        "name": url.rsplit("/", 1)[-1],
        "type": "file",
        "file": {"url": url, "expiry_time": "2024-01-01T01:00:00.000Z"},
    }


def make_page(
    page_id: str,
    title: str = "Post",
    media: Optional[List[dict]] = None,
    date: Optional[str] = None,
    media_field: str = "Media (URLs or leave blank)",
    status: Optional[str] = None,
    caption: Optional[str] = None,
) -> dict:
    properties = {"Post Title": title_prop(title)}
    if media is not None:
        properties[media_field] = files_prop(*media)
    if date is not None:
        properties["Post Date"] = {"type": "date", "date": {"start": date, "end": None}}
    if status is not None:
        properties["Status"] = {"type": "status", "status": {"name": status}}
    if caption is not None:
        properties["Caption"] = {"type": "rich_text", "rich_text": [{"plain_text": caption}]}
    return {"object": "page", "id": page_id, "properties": properties}


class FakeSource:
    """Records every query and replays scripted results or errors."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def query_database(self, database_id, page_size, filter=None, sorts=None):
        self.calls.append(
            {"database_id": database_id, "page_size": page_size, "filter": filter, "sorts": sorts}
        )
        response = self.responses.pop(0) if self.responses else []
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def three_records():
    """A: two images and the later date, B: no media, C: one video, earlier."""
    return [
        make_page(
            "a",
            title="A",
            date="2024-05-02",
            media=[external("https://cdn.example.com/a1.jpg"), hosted("https://s3.example.com/a2.png?sig=1")],
        ),
        make_page("b", title="B", date="2024-05-01", media=[]),
        make_page(
            "c",
            title="C",
            date="2024-04-01",
            media=[external("https://cdn.example.com/clip.mp4")],
        ),
    ]
