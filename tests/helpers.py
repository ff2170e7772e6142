"""Shared helpers for inspecting mocked Stripe calls."""


class MockResponse:
    """Stand-in for requests.Response with a fixed status and JSON body."""

    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json_data = json_data if json_data is not None else {}
        self.text = text

    def json(self):
        return self._json_data


def sent_body(mock_request, call_index=-1):
    """Form body of a recorded call."""
    return mock_request.call_args_list[call_index].kwargs["data"]


def sent_url(mock_request, call_index=-1):
    return mock_request.call_args_list[call_index].args[1]


def sent_method(mock_request, call_index=-1):
    return mock_request.call_args_list[call_index].args[0]
