"""
Data store facade.

One coroutine per application intent. Each intent is composed from catalog
statements run in dependency order (insert then use the generated id, probe
a vote then insert or overwrite it). Rows are normalized into the models of
`schemas.py`; failures surface as the errors of `forum.core.errors`.

Multi-statement intents (creating a question with its tags, casting a vote,
accepting an answer) run inside one transaction on one connection.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import asyncpg

from forum.catalog import queries
from forum.catalog.schema import SCHEMA
from forum.core.db import DRIVER_ERRORS, Database
from forum.core.errors import (
    DeletionFailedError,
    DuplicateEntityError,
    FetchFailedError,
    InsertionFailedError,
    InvalidArgumentError,
    NotFoundError,
    OwnershipError,
    UpdateFailedError,
)
from forum.search import SearchKind, parse_search

from .schemas import (
    Answer,
    Comment,
    NewComment,
    NewQuestion,
    QuestionDetail,
    QuestionSummary,
    Tag,
    User,
    UserLookup,
    UserProfile,
    VoteStatus,
    VoteTally,
)

logger = logging.getLogger(__name__)

UPVOTE = 1
DOWNVOTE = -1

_SEARCH_STATEMENTS = {
    SearchKind.USERNAME: queries.SEARCH_QUESTIONS_BY_USERNAME,
    SearchKind.TAG: queries.SEARCH_QUESTIONS_BY_TAG_NAME,
    SearchKind.ACCEPTANCE: queries.SEARCH_QUESTIONS_BY_ACCEPTANCE,
    SearchKind.ANSWER_COUNT: queries.SEARCH_QUESTIONS_BY_ANSWER_COUNT,
    SearchKind.TEXT: queries.SEARCH_QUESTIONS_BY_TEXT,
}


def _inserted_id(row: dict | None, failure_message: str) -> int:
    if row is None or row.get("id") is None:
        raise InsertionFailedError(failure_message)
    return int(row["id"])


def _require_row(row: dict | None) -> dict:
    # A row is only "found" when its id is set; aggregate queries can return
    # a row made of NULLs.
    if row is None or row.get("id") is None:
        raise NotFoundError("Wrong Id Provided")
    return row


def _question_id(question: Any) -> int:
    if isinstance(question, int):
        return question
    if isinstance(question, dict):
        return int(question["id"])
    return int(question.id)


class DataStore:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def initialize_schema(self) -> None:
        await self._db.execute(SCHEMA)
        logger.info("schema_initialized")

    # -- users -------------------------------------------------------------

    async def create_user(self, username: str, avatar_url: str | None) -> int:
        try:
            row = await self._db.fetch_one(queries.USER_INSERTION, username, avatar_url)
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateEntityError("User Already Exists!") from exc
        return _inserted_id(row, "User Insertion Failed!")

    async def get_user(self, key: str, value: Any) -> UserLookup:
        """
        Look a user up by any users column.

        This is a probe: absence is reported through `is_found`, not raised.
        """
        row = await self._db.fetch_one(queries.user_lookup(key), value)
        if row is None:
            return UserLookup(user=None, is_found=False)
        return UserLookup(user=User.model_validate(row), is_found=True)

    async def update_user_profile(self, user_id: int, profile: UserProfile) -> None:
        try:
            await self._db.execute(
                queries.USER_UPDATION,
                profile.name,
                profile.email,
                profile.location,
                profile.bio or "",
                user_id,
            )
        except DRIVER_ERRORS as exc:
            logger.warning("user_update_failed user_id=%s", user_id)
            raise UpdateFailedError("User Update Failed") from exc

    # -- questions ---------------------------------------------------------

    async def get_question(self, question_id: int) -> QuestionDetail:
        row = await self._db.fetch_one(queries.QUESTION_DETAILS, question_id)
        return QuestionDetail.model_validate(_require_row(row))

    async def list_recent_questions(self, count: int) -> list[QuestionSummary]:
        """
        Newest `count` questions, newest first.
        """
        if count < 0:
            raise InvalidArgumentError("Invalid Count")
        rows = await self._db.fetch_all(queries.LAST_QUESTIONS)
        return [QuestionSummary.model_validate(row) for row in rows[:count]]

    async def create_question(self, question: NewQuestion, owner_id: int) -> int:
        """
        Insert the question, then resolve and link its tags one by one.

        Runs as a single transaction: if any tag fails, the question row is
        rolled back along with the links made so far.
        """
        async with self._db.transaction() as tx:
            scoped = DataStore(tx)
            question_id = await scoped._insert_question_content(question, owner_id)
            await scoped._link_question_tags(question_id, question.tags)
        return question_id

    async def _insert_question_content(self, question: NewQuestion, owner_id: int) -> int:
        try:
            row = await self._db.fetch_one(
                queries.QUESTION_INSERTION,
                question.title,
                question.body,
                question.body_text,
                owner_id,
            )
        except DRIVER_ERRORS as exc:
            logger.warning("question_insertion_failed owner_id=%s", owner_id)
            raise InsertionFailedError("Question Insertion Incomplete!") from exc
        return _inserted_id(row, "Question Insertion Incomplete!")

    async def _link_question_tags(self, question_id: int, tag_names: Iterable[str]) -> None:
        for tag_name in tag_names:
            try:
                tag = await self.resolve_or_create_tag(tag_name)
                await self._db.execute(queries.QUESTION_TAG_INSERTION, question_id, tag.id)
            except DRIVER_ERRORS as exc:
                logger.warning("tag_link_failed question_id=%s tag=%s", question_id, tag_name)
                raise InsertionFailedError("Tag Insertion Failed!") from exc

    async def get_questions_by_owner(self, user_id: int) -> list[QuestionSummary]:
        rows = await self._db.fetch_all(queries.USER_QUESTIONS, user_id)
        return [QuestionSummary.model_validate(row) for row in rows]

    async def search_questions(self, raw_expression: str) -> list[QuestionSummary]:
        search = parse_search(raw_expression)
        if search.matches_nothing:
            return []
        rows = await self._db.fetch_all(_SEARCH_STATEMENTS[search.kind], search.pattern)
        return [QuestionSummary.model_validate(row) for row in rows]

    # -- tags --------------------------------------------------------------

    async def resolve_or_create_tag(self, tag_name: str) -> Tag:
        # The insert is a no-op for an existing name; the fetch resolves both cases.
        await self._db.execute(queries.TAG_INSERTION, tag_name)
        row = await self._db.fetch_one(queries.TAG_BY_NAME, tag_name)
        if row is None:
            raise NotFoundError(f"Tag could not be resolved: {tag_name}")
        return Tag.model_validate(row)

    async def get_question_tags(self, question_id: int) -> list[str]:
        rows = await self._db.fetch_all(queries.QUESTION_TAGS, question_id)
        return [str(row["tag_name"]) for row in rows]

    async def get_tags_for_questions(self, questions: Iterable[Any]) -> list[str]:
        """
        Union of the tags of every question, without duplicates, in the
        order they are first seen.
        """
        seen: dict[str, None] = {}
        for question in questions:
            for tag_name in await self.get_question_tags(_question_id(question)):
                seen.setdefault(tag_name, None)
        return list(seen)

    async def get_popular_tags(self, expression: str) -> list[str]:
        rows = await self._db.fetch_all(queries.POPULAR_TAGS, f"%{expression}%")
        return [str(row["tag_name"]) for row in rows]

    # -- answers -----------------------------------------------------------

    async def get_answer(self, answer_id: int) -> Answer:
        row = await self._db.fetch_one(queries.ANSWER_BY_ID, answer_id)
        return Answer.model_validate(_require_row(row))

    async def get_answers_by_question(self, question_id: int) -> list[Answer]:
        rows = await self._db.fetch_all(queries.ANSWERS_BY_QUESTION, question_id)
        return [Answer.model_validate(row) for row in rows]

    async def get_answers_by_owner(self, user_id: int) -> list[Answer]:
        rows = await self._db.fetch_all(queries.ANSWERS_BY_USER, user_id)
        return [Answer.model_validate(row) for row in rows]

    async def create_answer(self, body: str, body_text: str, question_id: int, owner_id: int) -> int:
        try:
            row = await self._db.fetch_one(queries.ANSWER_INSERTION, body, body_text, question_id, owner_id)
        except DRIVER_ERRORS as exc:
            logger.warning("answer_insertion_failed question_id=%s owner_id=%s", question_id, owner_id)
            raise InsertionFailedError("Answer Insertion Failed!") from exc
        return _inserted_id(row, "Answer Insertion Failed!")

    async def accept_answer(self, answer_id: int, *, owner_id: int | None = None) -> None:
        """
        Mark `answer_id` as the accepted answer of its question.

        Any sibling answer that was accepted is cleared in the same
        transaction, with the parent question row locked, so a question never
        ends up with two accepted answers. When `owner_id` is given it must
        be the owner of the question.
        """
        try:
            async with self._db.transaction() as tx:
                row = await tx.fetch_one(queries.ANSWER_QUESTION_FOR_UPDATE, answer_id)
                if row is None:
                    raise NotFoundError("Wrong Id Provided")
                if owner_id is not None and int(row["question_owner_id"]) != owner_id:
                    raise OwnershipError("Only the owner of the question can accept an answer")
                await tx.execute(queries.CLEAR_ACCEPTED_ANSWERS, row["question_id"])
                await tx.execute(queries.ACCEPT_ANSWER, answer_id)
        except DRIVER_ERRORS as exc:
            logger.warning("answer_acceptance_failed answer_id=%s", answer_id)
            raise UpdateFailedError("Could not accept the answer") from exc

    async def reject_answer(self, answer_id: int) -> None:
        try:
            await self._db.execute(queries.REJECT_ANSWER, answer_id)
        except DRIVER_ERRORS as exc:
            logger.warning("answer_rejection_failed answer_id=%s", answer_id)
            raise UpdateFailedError("Answer rejection failed") from exc

    # -- votes -------------------------------------------------------------

    async def get_vote(self, subject_id: int, user_id: int, *, is_question: bool) -> VoteStatus:
        statements = queries.vote_statements(is_question)
        try:
            row = await self._db.fetch_one(statements.by_user, subject_id, user_id)
        except DRIVER_ERRORS as exc:
            logger.warning("vote_fetch_failed subject_id=%s user_id=%s", subject_id, user_id)
            raise FetchFailedError("Fetching vote failed") from exc
        if row is None:
            return VoteStatus(is_voted=False)
        return VoteStatus(is_voted=True, vote_type=int(row["vote_type"]))

    async def cast_vote(self, subject_id: int, user_id: int, vote_type: int, *, is_question: bool) -> None:
        """
        Record a vote, or overwrite the user's existing vote on the subject.

        The new type replaces the old one; votes never accumulate.
        """
        if vote_type not in (UPVOTE, DOWNVOTE):
            raise InvalidArgumentError(f"Invalid vote type: {vote_type}")

        statements = queries.vote_statements(is_question)
        async with self._db.transaction() as tx:
            existing = await DataStore(tx).get_vote(subject_id, user_id, is_question=is_question)
            if existing.is_voted:
                try:
                    await tx.execute(statements.toggle, subject_id, user_id, vote_type)
                except DRIVER_ERRORS as exc:
                    logger.warning("vote_update_failed subject_id=%s user_id=%s", subject_id, user_id)
                    raise UpdateFailedError("Vote Update Failed") from exc
            else:
                try:
                    await tx.execute(statements.addition, subject_id, user_id, vote_type)
                except DRIVER_ERRORS as exc:
                    logger.warning("vote_addition_failed subject_id=%s user_id=%s", subject_id, user_id)
                    raise InsertionFailedError("Vote Addition Failed") from exc

    async def retract_vote(self, subject_id: int, user_id: int, *, is_question: bool) -> None:
        statements = queries.vote_statements(is_question)
        try:
            await self._db.execute(statements.deletion, subject_id, user_id)
        except DRIVER_ERRORS as exc:
            logger.warning("vote_deletion_failed subject_id=%s user_id=%s", subject_id, user_id)
            raise DeletionFailedError("Vote Deletion Failed") from exc

    async def get_vote_tally(self, subject_id: int, *, is_question: bool) -> VoteTally:
        statements = queries.vote_statements(is_question)
        try:
            row = await self._db.fetch_one(statements.count, subject_id)
        except DRIVER_ERRORS as exc:
            logger.warning("vote_count_failed subject_id=%s", subject_id)
            raise FetchFailedError("Vote Count Fetching Error") from exc
        return VoteTally.model_validate(row or {})

    # -- comments ----------------------------------------------------------

    async def get_comments(self, subject_id: int, *, is_question: bool) -> list[Comment]:
        statements = queries.comment_statements(is_question)
        rows = await self._db.fetch_all(statements.listing, subject_id)
        return [Comment.model_validate(row) for row in rows]

    async def save_comment(self, comment: NewComment, *, is_question: bool) -> int:
        statements = queries.comment_statements(is_question)
        try:
            row = await self._db.fetch_one(
                statements.insertion,
                comment.body,
                comment.owner_id,
                comment.subject_id,
                comment.creation_time,
            )
        except DRIVER_ERRORS as exc:
            logger.warning("comment_insertion_failed subject_id=%s owner_id=%s", comment.subject_id, comment.owner_id)
            raise InsertionFailedError("Comment Insertion Failed!") from exc
        return _inserted_id(row, "Comment Insertion Failed!")
