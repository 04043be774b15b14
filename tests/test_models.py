import uuid

from estatehub import models
from estatehub.models import Chat, pair_key


def test_models_import_with_chat_helpers_intact():
    assert isinstance(Chat.__dict__["participants"], property)
    assert isinstance(Chat.__dict__["participant_ids"], property)
    assert hasattr(models.Chat, "property")


def test_chat_participants_helpers():
    a, b = uuid.uuid4(), uuid.uuid4()
    chat = Chat(property_id=uuid.uuid4(), user_a_id=a, user_b_id=b, participant_key=pair_key(a, b))

    assert chat.participant_ids == [a, b]
    assert chat.has_participant(b)
    assert not chat.has_participant(uuid.uuid4())


def test_pair_key_ignores_order():
    a, b = uuid.uuid4(), uuid.uuid4()
    assert pair_key(a, b) == pair_key(b, a)
