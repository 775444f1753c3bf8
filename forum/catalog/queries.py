"""
Named, parameterized statements used by the data store.

Substring filters are bound pre-wrapped (`%value%`) by the caller.
Question and answer subjects live in disjoint tables; the vote and comment
statements for each space are grouped so callers pick a space, never a
table name.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

USER_COLUMNS = ("id", "username", "avatar_url", "name", "email", "location", "bio", "role")

USER_INSERTION = """
INSERT INTO users (username, avatar_url)
VALUES ($1, $2)
RETURNING id
"""

USER_UPDATION = """
UPDATE users
SET name = $1,
    email = $2,
    location = $3,
    bio = $4
WHERE id = $5
"""


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def user_lookup(column: str) -> str:
    # The column is quoted, not validated: an unknown name is reported by
    # the database itself.
    return f"""
SELECT {", ".join(USER_COLUMNS)}
FROM users
WHERE {_quote_ident(column)} = $1
"""


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------

_QUESTION_SUMMARIES = """
  SELECT
    q.id,
    q.title,
    q.body,
    q.body_text,
    q.owner_id,
    u.username AS owner_name,
    u.avatar_url AS owner_avatar,
    q.created_at,
    q.last_modified,
    COALESCE(v.vote_count, 0) AS vote_count,
    COALESCE(a.answer_count, 0) AS answer_count,
    COALESCE(a.has_accepted_answer, false) AS has_accepted_answer
  FROM questions q
  JOIN users u ON u.id = q.owner_id
  LEFT JOIN LATERAL (
    SELECT sum(qv.vote_type) AS vote_count
    FROM question_votes qv
    WHERE qv.question_id = q.id
  ) v ON true
  LEFT JOIN LATERAL (
    SELECT count(*) AS answer_count, bool_or(an.is_accepted) AS has_accepted_answer
    FROM answers an
    WHERE an.question_id = q.id
  ) a ON true
"""


def _questions_where(condition: str) -> str:
    return f"""
SELECT *
FROM ({_QUESTION_SUMMARIES}) qs
WHERE {condition}
ORDER BY qs.created_at DESC, qs.id DESC
"""


QUESTION_INSERTION = """
INSERT INTO questions (title, body, body_text, owner_id)
VALUES ($1, $2, $3, $4)
RETURNING id
"""

QUESTION_DETAILS = _questions_where("qs.id = $1")

# No LIMIT: the store trims the rows itself.
LAST_QUESTIONS = _questions_where("true")

USER_QUESTIONS = _questions_where("qs.owner_id = $1")

SEARCH_QUESTIONS_BY_TEXT = _questions_where("(qs.title ILIKE $1 OR qs.body_text ILIKE $1)")

SEARCH_QUESTIONS_BY_USERNAME = _questions_where("qs.owner_name ILIKE $1")

SEARCH_QUESTIONS_BY_TAG_NAME = _questions_where(
    """
  EXISTS (
    SELECT 1
    FROM question_tags qt
    JOIN tags t ON t.id = qt.tag_id
    WHERE qt.question_id = qs.id
      AND t.tag_name ILIKE $1
  )
"""
)

SEARCH_QUESTIONS_BY_ACCEPTANCE = _questions_where("qs.has_accepted_answer = $1")

SEARCH_QUESTIONS_BY_ANSWER_COUNT = _questions_where("qs.answer_count > $1")


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

TAG_INSERTION = """
INSERT INTO tags (tag_name)
VALUES ($1)
ON CONFLICT (tag_name) DO NOTHING
"""

TAG_BY_NAME = """
SELECT id, tag_name
FROM tags
WHERE tag_name = $1
"""

QUESTION_TAG_INSERTION = """
INSERT INTO question_tags (question_id, tag_id)
VALUES ($1, $2)
ON CONFLICT (question_id, tag_id) DO NOTHING
"""

QUESTION_TAGS = """
SELECT t.tag_name
FROM question_tags qt
JOIN tags t ON t.id = qt.tag_id
WHERE qt.question_id = $1
ORDER BY qt.id ASC
"""

POPULAR_TAGS = """
SELECT t.tag_name, count(qt.question_id) AS usage_count
FROM tags t
LEFT JOIN question_tags qt ON qt.tag_id = t.id
WHERE t.tag_name ILIKE $1
GROUP BY t.id, t.tag_name
ORDER BY usage_count DESC, t.tag_name ASC
"""


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------

_ANSWERS = """
SELECT
  an.id,
  an.body,
  an.body_text,
  an.question_id,
  an.owner_id,
  u.username AS owner_name,
  u.avatar_url AS owner_avatar,
  an.is_accepted,
  an.created_at,
  an.last_modified,
  COALESCE(v.vote_count, 0) AS vote_count
FROM answers an
JOIN users u ON u.id = an.owner_id
LEFT JOIN LATERAL (
  SELECT sum(av.vote_type) AS vote_count
  FROM answer_votes av
  WHERE av.answer_id = an.id
) v ON true
"""

ANSWER_INSERTION = """
INSERT INTO answers (body, body_text, question_id, owner_id)
VALUES ($1, $2, $3, $4)
RETURNING id
"""

ANSWER_BY_ID = _ANSWERS + "WHERE an.id = $1\n"

ANSWERS_BY_QUESTION = (
    _ANSWERS
    + """WHERE an.question_id = $1
ORDER BY an.is_accepted DESC, vote_count DESC, an.created_at ASC, an.id ASC
"""
)

ANSWERS_BY_USER = (
    _ANSWERS
    + """WHERE an.owner_id = $1
ORDER BY an.created_at DESC, an.id DESC
"""
)

# Locks the parent question so concurrent accepts on it run one at a time.
ANSWER_QUESTION_FOR_UPDATE = """
SELECT an.question_id, q.owner_id AS question_owner_id
FROM answers an
JOIN questions q ON q.id = an.question_id
WHERE an.id = $1
FOR UPDATE OF q
"""

CLEAR_ACCEPTED_ANSWERS = """
UPDATE answers
SET is_accepted = false
WHERE question_id = $1
  AND is_accepted
"""

ACCEPT_ANSWER = """
UPDATE answers
SET is_accepted = true
WHERE id = $1
"""

REJECT_ANSWER = """
UPDATE answers
SET is_accepted = false
WHERE id = $1
"""


# ---------------------------------------------------------------------------
# Votes and comments (one statement set per subject space)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VoteStatements:
    """
    All statements take `$1` = subject id, `$2` = user id, and, where a
    vote type is written, `$3` = vote type.
    """

    by_user: str
    addition: str
    toggle: str
    deletion: str
    count: str


@dataclass(frozen=True)
class CommentStatements:
    listing: str
    insertion: str


def _vote_statements(table: str, subject_column: str) -> VoteStatements:
    return VoteStatements(
        by_user=f"""
SELECT vote_type
FROM {table}
WHERE {subject_column} = $1
  AND user_id = $2
""",
        # A concurrent first vote by the same user lands on the conflict
        # branch and overwrites, so the pair never fails or duplicates.
        addition=f"""
INSERT INTO {table} ({subject_column}, user_id, vote_type)
VALUES ($1, $2, $3)
ON CONFLICT ({subject_column}, user_id) DO UPDATE
SET vote_type = EXCLUDED.vote_type
""",
        toggle=f"""
UPDATE {table}
SET vote_type = $3
WHERE {subject_column} = $1
  AND user_id = $2
""",
        deletion=f"""
DELETE FROM {table}
WHERE {subject_column} = $1
  AND user_id = $2
""",
        count=f"""
SELECT
  COALESCE(sum(vote_type), 0) AS count,
  count(*) FILTER (WHERE vote_type > 0) AS upvotes,
  count(*) FILTER (WHERE vote_type < 0) AS downvotes
FROM {table}
WHERE {subject_column} = $1
""",
    )


def _comment_statements(table: str, subject_column: str) -> CommentStatements:
    return CommentStatements(
        listing=f"""
SELECT
  c.id,
  c.body,
  c.owner_id,
  u.username AS owner_name,
  u.avatar_url AS owner_avatar,
  c.{subject_column} AS subject_id,
  c.created_at,
  c.last_modified
FROM {table} c
JOIN users u ON u.id = c.owner_id
WHERE c.{subject_column} = $1
ORDER BY c.created_at ASC, c.id ASC
""",
        # Comments are append-only: creation time doubles as last modified.
        insertion=f"""
INSERT INTO {table} (body, owner_id, {subject_column}, created_at, last_modified)
VALUES ($1, $2, $3, $4, $4)
RETURNING id
""",
    )


QUESTION_VOTES = _vote_statements("question_votes", "question_id")
ANSWER_VOTES = _vote_statements("answer_votes", "answer_id")

QUESTION_COMMENTS = _comment_statements("question_comments", "question_id")
ANSWER_COMMENTS = _comment_statements("answer_comments", "answer_id")


def vote_statements(is_question: bool) -> VoteStatements:
    return QUESTION_VOTES if is_question else ANSWER_VOTES


def comment_statements(is_question: bool) -> CommentStatements:
    return QUESTION_COMMENTS if is_question else ANSWER_COMMENTS
