import pytest

class FakeRequest():
    def __init__(self, response: dict) -> None:
        self.response = response

    def execute(self) -> dict:
        return self.response

class FakeCollection():
    """
    Stands in for a discovery Resource collection.  Any method call records
    its name and kwargs and returns a request answering with the canned response.
    Any attribute that's called with no args hands back another collection.
    """
    def __init__(self, calls: list, response: dict) -> None:
        self.calls = calls
        self.response = response

    def __getattr__(self, name: str):
        def method(**kwargs):
            if not kwargs:
                return self
            self.calls.append((name, kwargs))
            return FakeRequest(self.response)
        return method

@pytest.fixture
def fake_service():
    def _make(response: dict):
        calls = []
        return FakeCollection(calls, response), calls
    return _make
