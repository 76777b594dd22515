import pytest

from utils.exceptions import RetriableValueError
from utils.rpc_utils import build_rpc_payload, is_retriable_error, rpc_response_to_result


def test_build_rpc_payload():
    assert build_rpc_payload("eth_getStorageAt", ["0xabc", "0x0", "latest"], 7) == {
        "jsonrpc": "2.0",
        "method": "eth_getStorageAt",
        "params": ["0xabc", "0x0", "latest"],
        "id": 7,
    }


def test_result_is_returned():
    assert rpc_response_to_result({"jsonrpc": "2.0", "id": 1, "result": "0x01"}) == "0x01"


def test_null_result_without_error_is_legitimate():
    assert rpc_response_to_result({"jsonrpc": "2.0", "id": 1, "result": None}) is None


def test_missing_result_is_retriable():
    with pytest.raises(RetriableValueError):
        rpc_response_to_result({"jsonrpc": "2.0", "id": 1})


def test_non_dict_response_is_retriable():
    with pytest.raises(RetriableValueError):
        rpc_response_to_result([{"result": "0x"}])


def test_server_error_is_retriable():
    with pytest.raises(RetriableValueError):
        rpc_response_to_result({"id": 1, "error": {"code": -32005, "message": "limit exceeded"}})


def test_revert_is_not_retriable():
    with pytest.raises(ValueError) as exc_info:
        rpc_response_to_result({"id": 1, "error": {"code": -32000, "message": "execution reverted"}})
    assert not isinstance(exc_info.value, RetriableValueError)


@pytest.mark.parametrize(
    "code, message, expected",
    [
        (-32603, "internal error", True),
        (-32000, "header not found", True),
        (-32099, None, True),
        (-32000, "execution reverted", False),
        (3, "execution reverted: not owner", False),
        (-32602, "invalid argument", False),
        (None, None, False),
        ("-32000", None, False),
    ],
)
def test_is_retriable_error(code, message, expected):
    assert is_retriable_error(code, message) is expected
