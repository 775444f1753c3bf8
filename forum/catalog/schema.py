"""
Schema initialization script.

Every statement is safe to re-run (`IF NOT EXISTS`), so the script can be
executed on each process start.
"""

from __future__ import annotations

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
  id BIGSERIAL PRIMARY KEY,
  username TEXT NOT NULL UNIQUE,
  avatar_url TEXT,
  name TEXT,
  email TEXT,
  location TEXT,
  bio TEXT NOT NULL DEFAULT '',
  role TEXT NOT NULL DEFAULT 'user',
  created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS questions (
  id BIGSERIAL PRIMARY KEY,
  title TEXT NOT NULL,
  body TEXT NOT NULL,
  body_text TEXT NOT NULL,
  owner_id BIGINT NOT NULL REFERENCES users (id),
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  last_modified TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS tags (
  id BIGSERIAL PRIMARY KEY,
  tag_name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS question_tags (
  id BIGSERIAL PRIMARY KEY,
  question_id BIGINT NOT NULL REFERENCES questions (id) ON DELETE CASCADE,
  tag_id BIGINT NOT NULL REFERENCES tags (id),
  UNIQUE (question_id, tag_id)
);

CREATE TABLE IF NOT EXISTS answers (
  id BIGSERIAL PRIMARY KEY,
  body TEXT NOT NULL,
  body_text TEXT NOT NULL,
  question_id BIGINT NOT NULL REFERENCES questions (id) ON DELETE CASCADE,
  owner_id BIGINT NOT NULL REFERENCES users (id),
  is_accepted BOOLEAN NOT NULL DEFAULT false,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  last_modified TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE UNIQUE INDEX IF NOT EXISTS answers_one_accepted_per_question
  ON answers (question_id)
  WHERE is_accepted;

CREATE TABLE IF NOT EXISTS question_votes (
  question_id BIGINT NOT NULL REFERENCES questions (id) ON DELETE CASCADE,
  user_id BIGINT NOT NULL REFERENCES users (id),
  vote_type SMALLINT NOT NULL CHECK (vote_type IN (-1, 1)),
  PRIMARY KEY (question_id, user_id)
);

CREATE TABLE IF NOT EXISTS answer_votes (
  answer_id BIGINT NOT NULL REFERENCES answers (id) ON DELETE CASCADE,
  user_id BIGINT NOT NULL REFERENCES users (id),
  vote_type SMALLINT NOT NULL CHECK (vote_type IN (-1, 1)),
  PRIMARY KEY (answer_id, user_id)
);

CREATE TABLE IF NOT EXISTS question_comments (
  id BIGSERIAL PRIMARY KEY,
  body TEXT NOT NULL,
  owner_id BIGINT NOT NULL REFERENCES users (id),
  question_id BIGINT NOT NULL REFERENCES questions (id) ON DELETE CASCADE,
  created_at TIMESTAMPTZ NOT NULL,
  last_modified TIMESTAMPTZ NOT NULL
);

CREATE TABLE IF NOT EXISTS answer_comments (
  id BIGSERIAL PRIMARY KEY,
  body TEXT NOT NULL,
  owner_id BIGINT NOT NULL REFERENCES users (id),
  answer_id BIGINT NOT NULL REFERENCES answers (id) ON DELETE CASCADE,
  created_at TIMESTAMPTZ NOT NULL,
  last_modified TIMESTAMPTZ NOT NULL
);

CREATE INDEX IF NOT EXISTS questions_owner_idx ON questions (owner_id);
CREATE INDEX IF NOT EXISTS questions_created_idx ON questions (created_at DESC, id DESC);
CREATE INDEX IF NOT EXISTS answers_question_idx ON answers (question_id);
CREATE INDEX IF NOT EXISTS answers_owner_idx ON answers (owner_id);
CREATE INDEX IF NOT EXISTS question_tags_tag_idx ON question_tags (tag_id);
"""
