import re

import pytest
from fastapi.testclient import TestClient

from s3gateway.config import Settings
from s3gateway.exceptions import StoreError
from s3gateway.main import create_app

from conftest import FakeStore

ROW_LINK = re.compile(r'<tr><td><a href="([^"]*)">([^<]*)</a></td>')


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))


def test_serves_files(client):
    response = client.get("/file.txt")

    assert response.status_code == 200
    assert response.content == b"I am a file"
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.headers["content-length"] == str(len(b"I am a file"))


def test_serves_nested_files(client):
    response = client.get("/folder/file.txt")

    assert response.status_code == 200
    assert response.content == b"I am a file in a folder"


def test_serves_top_level_folder(client, store):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<h1>/</h1>" in response.text
    assert ROW_LINK.findall(response.text) == [("./folder/", "folder/"), ("./file.txt", "file.txt")]
    assert "get_object" not in store.operations()


@pytest.mark.parametrize("url", ["/folder/", "/folder"])
def test_serves_second_level_folder(client, url):
    response = client.get(url)

    assert response.status_code == 200
    assert "<h1>folder/</h1>" in response.text
    assert ROW_LINK.findall(response.text) == [("../", ".."), ("./file.txt", "file.txt")]


def test_missing_path_is_empty_folder(client, store):
    response = client.get("/missing.txt")

    assert response.status_code == 200
    assert "<h1>missing.txt/</h1>" in response.text
    assert ROW_LINK.findall(response.text) == [("../", "..")]
    assert store.operations() == ["get_object", "list_objects"]


def test_unreachable_store_is_502(client, store):
    store.get_error = StoreError("Could not connect to the endpoint URL")

    response = client.get("/x.txt")

    assert response.status_code == 502
    assert store.operations() == ["get_object"]


def test_listing_failure_is_404(client, store):
    store.list_error = StoreError("Could not connect to the endpoint URL")

    response = client.get("/")

    assert response.status_code == 404


def test_invalid_path_is_400(client, store):
    response = client.get("/folder%5C..%5Cfile.txt")

    assert response.status_code == 400
    assert store.calls == []


def test_only_get_is_allowed(client):
    response = client.post("/file.txt")

    assert response.status_code == 405


def test_lifespan_uses_injected_store(store):
    settings = Settings(bucket_name="fake", endpoint="memory://", log_level="WARNING")

    with TestClient(create_app(settings=settings, store=store)) as client:
        response = client.get("/file.txt")

    assert response.content == b"I am a file"


@pytest.mark.parametrize("url, base", [("/", "/"), ("/folder", "/folder/"), ("/folder/", "/folder/")])
def test_folder_links_resolve_inside_the_folder(client, url, base):
    response = client.get(url)

    assert f'<base href="{base}" />' in response.text


def test_serves_keys_with_empty_segments():
    store = FakeStore({"a//b.txt": b"data", "/lead.txt": b"lead"})
    client = TestClient(create_app(store=store))

    assert client.get("/a//b.txt").content == b"data"
    assert store.calls[0] == ("get_object", "a//b.txt")
    assert client.get("/%2Flead.txt").content == b"lead"
    assert store.calls[-1] == ("get_object", "/lead.txt")

    listing = client.get("/a/")
    assert ROW_LINK.findall(listing.text) == [("../", ".."), (".//", "/")]
    assert '<a href="/">' not in listing.text

    nested = client.get("/a//")
    assert '<base href="/a//" />' in nested.text
    assert ROW_LINK.findall(nested.text) == [("../", ".."), ("./b.txt", "b.txt")]


def test_root_listing_links_are_never_absolute():
    client = TestClient(create_app(store=FakeStore({"/lead.txt": b"lead"})))

    response = client.get("/")

    assert ROW_LINK.findall(response.text) == [(".//", "/")]
