import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parley.models import Conversation, Message
from parley.repositories.conversation_repository import ConversationRepository
from parley.repositories.message_repository import MessageRepository
from parley.repositories.participant_repository import ParticipantRepository
from parley.services.exceptions import BusinessRuleError, NotAuthorizedError
from parley.services.messaging_service import MessagingService

pytestmark = pytest.mark.asyncio


def build_service(session: AsyncSession, **kwargs) -> MessagingService:
    return MessagingService(
        participant_repository=ParticipantRepository(session),
        message_repository=MessageRepository(session),
        conversation_repository=ConversationRepository(session),
        **kwargs,
    )


async def create_conversation(
    session_maker: async_sessionmaker[AsyncSession], *users
) -> Conversation:
    async with session_maker() as session:
        conversation = await ConversationRepository(session).create()
        await ParticipantRepository(session).add_participants(
            conversation.id, [user.id for user in users]
        )
        await session.commit()
        return conversation


async def message_count(session_maker: async_sessionmaker[AsyncSession]) -> int:
    async with session_maker() as session:
        return (await session.execute(select(func.count(Message.id)))).scalar_one()


async def test_send_message_persists_unread_message(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    bob = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice, bob)

    async with db_test_session_manager() as session:
        message = await build_service(session).send_message(
            conversation.id, "hello bob", alice.id
        )

    async with db_test_session_manager() as session:
        stored = await session.get(Message, message.id)
        assert stored is not None
        assert stored.content == "hello bob"
        assert stored.sender_id == alice.id
        assert stored.conversation_id == conversation.id
        assert stored.is_read is False


async def test_send_message_advances_last_activity(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    bob = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice, bob)

    async with db_test_session_manager() as session:
        first = await build_service(session).send_message(conversation.id, "one", alice.id)
    async with db_test_session_manager() as session:
        second = await build_service(session).send_message(conversation.id, "two", bob.id)

    # Read everything back through a fresh session so both values share a format
    async with db_test_session_manager() as session:
        stored_conversation = await session.get(Conversation, conversation.id)
        first_created = (await session.get(Message, first.id)).created_at
        second_created = (await session.get(Message, second.id)).created_at

    assert stored_conversation.last_activity_at >= first_created
    assert stored_conversation.last_activity_at >= second_created
    assert stored_conversation.last_activity_at == max(first_created, second_created)


async def test_activity_never_moves_backwards(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice)

    async with db_test_session_manager() as session:
        await build_service(session).send_message(conversation.id, "latest", alice.id)
    async with db_test_session_manager() as session:
        before = (await session.get(Conversation, conversation.id)).last_activity_at

    async with db_test_session_manager() as session:
        await ConversationRepository(session).touch_activity(
            conversation.id, before.replace(year=before.year - 1)
        )
        await session.commit()

    async with db_test_session_manager() as session:
        after = (await session.get(Conversation, conversation.id)).last_activity_at
    assert after == before


async def test_non_participant_cannot_send(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    mallory = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice)

    async with db_test_session_manager() as session:
        with pytest.raises(NotAuthorizedError) as exc_info:
            await build_service(session).send_message(
                conversation.id, "let me in", mallory.id
            )

    assert exc_info.value.status_code == 403
    assert await message_count(db_test_session_manager) == 0


async def test_send_to_unknown_conversation_is_not_authorized(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()

    async with db_test_session_manager() as session:
        with pytest.raises(NotAuthorizedError):
            await build_service(session).send_message(uuid.uuid4(), "hi", alice.id)


@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
async def test_blank_content_is_rejected(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user, content
):
    alice = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice)

    async with db_test_session_manager() as session:
        with pytest.raises(BusinessRuleError, match="cannot be empty"):
            await build_service(session).send_message(conversation.id, content, alice.id)

    assert await message_count(db_test_session_manager) == 0


async def test_content_length_cap(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice)

    async with db_test_session_manager() as session:
        service = build_service(session, max_content_length=5)
        with pytest.raises(BusinessRuleError, match="cannot exceed 5"):
            await service.send_message(conversation.id, "too long", alice.id)
        await service.send_message(conversation.id, "short", alice.id)

    assert await message_count(db_test_session_manager) == 1


async def test_mark_read_only_touches_received_messages(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    bob = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice, bob)

    async with db_test_session_manager() as session:
        service = build_service(session)
        from_alice = await service.send_message(conversation.id, "hi bob", alice.id)
        from_bob = await service.send_message(conversation.id, "hi alice", bob.id)

    async with db_test_session_manager() as session:
        updated = await build_service(session).mark_messages_as_read(
            conversation.id, bob.id
        )
    assert updated == 1

    async with db_test_session_manager() as session:
        assert (await session.get(Message, from_alice.id)).is_read is True
        assert (await session.get(Message, from_bob.id)).is_read is False

    # Nothing left to read, so a second call is a no-op
    async with db_test_session_manager() as session:
        assert (
            await build_service(session).mark_messages_as_read(conversation.id, bob.id)
        ) == 0


async def test_mark_read_requires_membership(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    mallory = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice)

    async with db_test_session_manager() as session:
        with pytest.raises(NotAuthorizedError):
            await build_service(session).mark_messages_as_read(
                conversation.id, mallory.id
            )


async def test_list_messages_pages_newest_first(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice)

    async with db_test_session_manager() as session:
        service = build_service(session)
        for i in range(5):
            await service.send_message(conversation.id, f"message {i}", alice.id)

    async with db_test_session_manager() as session:
        service = build_service(session)
        everything = await service.list_messages(conversation.id, alice.id, limit=10)
        first_page = await service.list_messages(
            conversation.id, alice.id, limit=2, offset=0
        )
        second_page = await service.list_messages(
            conversation.id, alice.id, limit=2, offset=2
        )

    assert len(everything) == 5
    assert everything[0].content == "message 4"
    created = [message.created_at for message in everything]
    assert created == sorted(created, reverse=True)

    assert [m.id for m in first_page] == [m.id for m in everything[:2]]
    assert [m.id for m in second_page] == [m.id for m in everything[2:4]]
    assert not {m.id for m in first_page} & {m.id for m in second_page}


async def test_list_messages_requires_membership(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    mallory = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice)

    async with db_test_session_manager() as session:
        with pytest.raises(NotAuthorizedError):
            await build_service(session).list_messages(conversation.id, mallory.id)


async def test_list_conversations_summaries(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    bob = await make_user()
    carol = await make_user()
    quiet = await create_conversation(db_test_session_manager, alice, carol)
    busy = await create_conversation(db_test_session_manager, alice, bob)
    await create_conversation(db_test_session_manager, bob, carol)

    async with db_test_session_manager() as session:
        service = build_service(session)
        await service.send_message(busy.id, "first", bob.id)
        await service.send_message(busy.id, "second", bob.id)
        await service.send_message(busy.id, "mine", alice.id)

    async with db_test_session_manager() as session:
        summaries = await build_service(session).list_conversations_for_user(alice.id)

    assert [s.conversation.id for s in summaries] == [busy.id, quiet.id]

    busy_summary, quiet_summary = summaries
    assert busy_summary.unread_count == 2
    assert busy_summary.last_message.content == "mine"
    assert {p.user_id for p in busy_summary.participants} == {alice.id, bob.id}

    assert quiet_summary.unread_count == 0
    assert quiet_summary.last_message is None


async def test_list_conversations_for_user_without_any(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    loner = await make_user()

    async with db_test_session_manager() as session:
        assert await build_service(session).list_conversations_for_user(loner.id) == []


async def test_mark_read_advances_last_activity(
    db_test_session_manager: async_sessionmaker[AsyncSession], make_user
):
    alice = await make_user()
    bob = await make_user()
    conversation = await create_conversation(db_test_session_manager, alice, bob)

    async with db_test_session_manager() as session:
        await build_service(session).send_message(conversation.id, "read me", alice.id)
    async with db_test_session_manager() as session:
        before = (await session.get(Conversation, conversation.id)).last_activity_at

    async with db_test_session_manager() as session:
        assert (
            await build_service(session).mark_messages_as_read(conversation.id, bob.id)
        ) == 1

    async with db_test_session_manager() as session:
        after = (await session.get(Conversation, conversation.id)).last_activity_at
    assert after > before
