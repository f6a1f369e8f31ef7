"""Database fixtures for entityql tests (shared)."""

import pytest
from datetime import date, datetime, time
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User, Post, Comment, PostLike, Role


async def create_sample_users(session: AsyncSession):
    users = [
        User(first_name="alice", last_name="Johnson", email="alice@example.com", password_hash="x1",
             is_admin=True, role=Role.EDITOR, settings={"theme": "dark"},
             created_at=datetime(2024, 1, 2, 3, 4, 5)),
        User(first_name="bob", last_name="Smith", email="bob@example.com", password_hash="x2",
             status="suspended", settings=None, created_at=datetime(2024, 2, 1, 12, 0, 0)),
    ]
    session.add_all(users)
    await session.flush()
    await session.commit()
    return users


async def create_sample_posts(session: AsyncSession, users):
    alice, bob = users
    posts = [
        Post(title="First Post", body="Hello world!", author_id=alice.id, published_on=date(2024, 3, 1),
             reading_time=1.5, internal_note="draft"),
        Post(title="Second Post", body="More words", author_id=alice.id, published_on=None),
        Post(title="Bob's Post", body="Hi", author_id=bob.id, published_on=date(2024, 3, 5)),
    ]
    session.add_all(posts)
    await session.flush()
    await session.commit()
    return posts


async def create_sample_comments(session: AsyncSession, users, posts):
    """Five comments on the first post, in a known order, plus one elsewhere."""
    alice, bob = users
    first, _, third = posts
    comments = [
        Comment(content=f"comment {i}", rating=i, post_id=first.id, author_id=bob.id, posted_at=time(10, i, 0))
        for i in range(1, 6)
    ]
    comments.append(Comment(content="nice", rating=4, post_id=third.id, author_id=alice.id, posted_at=time(9, 0, 0)))
    session.add_all(comments)
    await session.flush()
    await session.commit()
    return comments


async def create_sample_likes(session: AsyncSession, users, posts):
    alice, bob = users
    likes = [
        PostLike(post_id=posts[0].id, user_id=bob.id),
        PostLike(post_id=posts[0].id, user_id=alice.id),
        PostLike(post_id=posts[2].id, user_id=alice.id),
    ]
    session.add_all(likes)
    await session.flush()
    await session.commit()
    return likes


@pytest.fixture(scope="function")
async def populated_db(db_session: AsyncSession):
    users = await create_sample_users(db_session)
    posts = await create_sample_posts(db_session, users)
    comments = await create_sample_comments(db_session, users, posts)
    likes = await create_sample_likes(db_session, users, posts)
    return {'users': users, 'posts': posts, 'comments': comments, 'likes': likes}
