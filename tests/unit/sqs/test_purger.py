"""Unit tests for purging a batch from the source queue."""

import pytest
from botocore.exceptions import ClientError

from queue_drain.errors import RemoteServiceError
from queue_drain.models.message import Batch
from queue_drain.sqs.purger import Purger

SOURCE = "https://sqs.us-east-1.amazonaws.com/123456789012/source"


def _batch(messages: list[dict]) -> Batch:
    return Batch.from_response(SOURCE, {"Messages": messages})


def test_purge_deletes_every_pulled_message(sqs_client, make_messages) -> None:
    messages = make_messages(4)

    result = Purger(sqs_client).purge(SOURCE, _batch(messages))

    sqs_client.delete_message_batch.assert_called_once_with(
        QueueUrl=SOURCE,
        Entries=[{"Id": m["MessageId"], "ReceiptHandle": m["ReceiptHandle"]} for m in messages],
    )
    assert result.deleted_ids == ("m0", "m1", "m2", "m3")
    assert result.failed_ids == ()


def test_purge_empty_batch_makes_no_call(sqs_client) -> None:
    result = Purger(sqs_client).purge(SOURCE, Batch(source_queue=SOURCE))

    sqs_client.delete_message_batch.assert_not_called()
    assert result.deleted_ids == ()


def test_purge_chunks_large_batches(sqs_client, make_messages) -> None:
    result = Purger(sqs_client).purge(SOURCE, _batch(make_messages(12)))

    calls = sqs_client.delete_message_batch.call_args_list
    assert [len(c.kwargs["Entries"]) for c in calls] == [10, 2]
    assert len(result.deleted_ids) == 12


def test_purge_call_error_raises(sqs_client, make_messages) -> None:
    sqs_client.delete_message_batch.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "nope"}}, "DeleteMessageBatch"
    )

    with pytest.raises(RemoteServiceError) as exc_info:
        Purger(sqs_client).purge(SOURCE, _batch(make_messages(1)))

    assert exc_info.value.operation == "delete_message_batch"


def _partially_failing(*, QueueUrl, Entries):  # noqa: N803
    return {
        "Successful": [{"Id": e["Id"]} for e in Entries[1:]],
        "Failed": [
            {
                "Id": Entries[0]["Id"],
                "SenderFault": True,
                "Code": "ReceiptHandleIsInvalid",
                "Message": "expired",
            }
        ],
    }


def test_rejected_entries_are_reported(sqs_client, make_messages, caplog) -> None:
    sqs_client.delete_message_batch.side_effect = _partially_failing

    result = Purger(sqs_client).purge(SOURCE, _batch(make_messages(3)))

    assert result.failed_ids == ("m0",)
    assert result.deleted_ids == ("m1", "m2")
    assert "ReceiptHandleIsInvalid" in caplog.text


def test_rejected_entries_raise_in_strict_mode(sqs_client, make_messages) -> None:
    sqs_client.delete_message_batch.side_effect = _partially_failing

    with pytest.raises(RemoteServiceError, match="1 entries rejected"):
        Purger(sqs_client, strict=True).purge(SOURCE, _batch(make_messages(3)))
