import pytest

import gwswire.people as people
from gwswire.people import UpdateContactPhotoRequest
from gwswire.rules import File, Source

JPEG_MAGIC = b"\xff\xd8\xff"

def test_photo_request_body(tmp_path):
    p = tmp_path / "me.jpg"
    p.write_bytes(JPEG_MAGIC)
    req = UpdateContactPhotoRequest.from_file(p, personFields="photos")
    assert(req)
    assert(req.trim() == {"photoBytes": "/9j/", "personFields": "photos"})

    req = UpdateContactPhotoRequest(photoBytes=JPEG_MAGIC, sources="READ_SOURCE_TYPE_CONTACT")
    assert(req.sources == ["READ_SOURCE_TYPE_CONTACT"])
    with pytest.raises(ValueError):
        UpdateContactPhotoRequest(photoBytes=JPEG_MAGIC, sources=["CONTACTS"])

def test_photo_send(monkeypatch, fake_service):
    svc, calls = fake_service({"person": {"resourceName": "people/c1"}})
    monkeypatch.setattr(people, "_get_service", lambda: svc)
    response = UpdateContactPhotoRequest(photoBytes=JPEG_MAGIC).send("people/c1")
    assert(response["person"]["resourceName"] == "people/c1")
    assert(calls == [("updateContactPhoto", {"resourceName": "people/c1",
                                             "body": {"photoBytes": "/9j/"}})])

    with pytest.raises(ValueError):
        UpdateContactPhotoRequest(photoBytes=JPEG_MAGIC).send("c1")
    with pytest.raises(RuntimeError):
        UpdateContactPhotoRequest().send("people/c1")

def test_rules_file_fingerprint():
    f = File.from_content("firestore.rules", 'rules_version = "2";')
    assert(f)
    assert(f.fingerprint.hex() == "94ee2a9e0b881623281612b4a9d8f25fe2bb8c27")
    assert(f.to_base()["fingerprint"] == "lO4qnguIFiMoFhK0qdjyX+K7jCc=")

def test_rules_source_round_trip():
    src = Source(files=[File.from_content("firestore.rules", 'rules_version = "2";'),
                        File(name="empty.rules", content="")])
    base = src.to_base()
    assert(base["files"][1] == {"name": "empty.rules", "content": "", "fingerprint": None})
    again = Source.from_base(base)
    assert(again == src)
    assert(isinstance(again.files[0], File))
    assert(not Source.from_base({"files": None}))

def test_photo_send_without_session(monkeypatch):
    monkeypatch.setattr(people.gws, "get_service", lambda name, version: None)
    with pytest.raises(RuntimeError):
        UpdateContactPhotoRequest(photoBytes=JPEG_MAGIC).send("people/c1")
