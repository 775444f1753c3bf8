"""Row builders shaped like the catalog's result columns."""

from datetime import datetime, timezone

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def user_row(id=1, username="octocat", **overrides):
    row = {
        "id": id,
        "username": username,
        "avatar_url": "https://avatars.example/octocat.png",
        "name": None,
        "email": None,
        "location": None,
        "bio": "",
        "role": "user",
    }
    row.update(overrides)
    return row


def question_row(id=1, title="How do closures work?", **overrides):
    row = {
        "id": id,
        "title": title,
        "body": "<p>Explain closures</p>",
        "body_text": "Explain closures",
        "owner_id": 1,
        "owner_name": "octocat",
        "owner_avatar": None,
        "created_at": NOW,
        "last_modified": NOW,
        "vote_count": 0,
        "answer_count": 0,
        "has_accepted_answer": False,
    }
    row.update(overrides)
    return row


def answer_row(id=1, question_id=1, **overrides):
    row = {
        "id": id,
        "body": "<p>Use a function</p>",
        "body_text": "Use a function",
        "question_id": question_id,
        "owner_id": 2,
        "owner_name": "hubot",
        "owner_avatar": None,
        "is_accepted": False,
        "created_at": NOW,
        "last_modified": NOW,
        "vote_count": 0,
    }
    row.update(overrides)
    return row


def comment_row(id=1, subject_id=1, **overrides):
    row = {
        "id": id,
        "body": "Nice one",
        "owner_id": 2,
        "owner_name": "hubot",
        "owner_avatar": None,
        "subject_id": subject_id,
        "created_at": NOW,
        "last_modified": NOW,
    }
    row.update(overrides)
    return row
