"""Database models for entityql tests (shared)."""

import enum

from sqlalchemy import Column, Integer, SmallInteger, String, Text, Boolean, DateTime, Date, Time, Float, ForeignKey, JSON, LargeBinary
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, relationship

from entityql import register_field, blacklist


class Base(DeclarativeBase):
    """Base class for test models."""
    pass


class Role(enum.Enum):
    MEMBER = "member"
    EDITOR = "editor"


class Badge:
    """Plain value object returned by a registered field; not a mapped entity."""

    def __init__(self, label):
        self.label = label


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100))
    email = Column(String(255), unique=True, nullable=False)
    password_hash = blacklist(Column(String(255)))
    status = Column(String(20), default='active')
    role = Column(SAEnum(Role), default=Role.MEMBER)
    is_admin = Column(Boolean, default=False, nullable=False)
    settings = Column(JSON)
    created_at = Column(DateTime)

    posts = relationship("Post", back_populates="author", order_by="Post.id")
    comments = relationship("Comment", back_populates="author", order_by="Comment.id")
    likes = blacklist(relationship("PostLike", back_populates="user"))

    @register_field('string', name='status')
    def status_label(self):
        return (self.status or '').upper()

    @register_field('Post', is_list=True, args=[('limit', 'integer', 'nullable')])
    def recent_posts(self, limit=None):
        posts = sorted(self.posts, key=lambda p: p.id, reverse=True)
        return posts if limit is None else posts[:limit]

    @register_field('integer', args=[('min_rating', 'smallint')])
    def rated_comment_count(self, min_rating):
        return sum(1 for c in self.comments if (c.rating or 0) >= min_rating)

    @register_field('Badge')
    def badge(self):
        return Badge('admin' if self.is_admin else 'member')


class Post(Base):
    __tablename__ = 'posts'
    __blacklist__ = ('internal_note',)

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    body = Column(Text)
    author_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    published_on = Column(Date)
    reading_time = Column(Float)
    internal_note = Column(String(255))

    author = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", order_by="Comment.id")
    likes = relationship("PostLike", back_populates="post", lazy="dynamic", order_by="PostLike.id")

    @register_field('datetime', is_list=True)
    def comment_times(self):
        return [c.posted_at for c in self.comments]


class Comment(Base):
    __tablename__ = 'comments'

    id = Column(Integer, primary_key=True)
    content = Column(String(1000), nullable=False)
    rating = Column(SmallInteger, default=0)
    post_id = Column(Integer, ForeignKey('posts.id'), nullable=False)
    author_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    posted_at = Column(Time)

    post = relationship("Post", back_populates="comments")
    author = relationship("User", back_populates="comments")


class PostLike(Base):
    __tablename__ = 'post_likes'

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey('posts.id'), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False)

    post = relationship("Post", back_populates="likes")
    user = relationship("User", back_populates="likes")


class Attachment(Base):
    """Stand-alone entity with a storage type the scalar table does not know."""
    __tablename__ = 'attachments'

    id = Column(Integer, primary_key=True)
    name = Column(String(100))
    payload = Column(LargeBinary)
    checksum = Column(String(64), info={'storage_type': 'text'})
