"""Example FastAPI app serving articles with the JSON:API codec.

Run with:
    uvicorn examples.jsonapi_example_app:app --reload

Try:
    /api/v1/articles?include=author,comments.author&fields[user]=name
    /api/v1/articles?filter[title][like]=%25API%25&sort=-id&page[limit]=1
"""
from __future__ import annotations

from typing import Any, AsyncGenerator

from fastapi import Depends, FastAPI
from sqlalchemy import Column, ForeignKey, Integer, String, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, relationship, selectinload, sessionmaker

from jsonapi_codec import (
    JSONAPIConfig,
    JSONAPISerializer,
    RequestContext,
    ResourceSchema,
    SchemaRegistry,
)
from jsonapi_codec.dependencies import JSONAPIRequest
from jsonapi_codec.middleware import ContentNegotiationMiddleware
from jsonapi_codec.responses import JSONAPIResponse, install_exception_handlers, send_error
from jsonapi_codec.sqlalchemy import SQLAlchemyFilterParser, SQLAlchemyResourceAccessor

DATABASE_URL = "sqlite+aiosqlite:///./jsonapi_example.db"

engine = create_async_engine(DATABASE_URL, echo=True)
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    articles = relationship("Article", back_populates="author")
    comments = relationship("Comment", back_populates="author")


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    body = Column(String, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"))
    author = relationship("User", back_populates="articles")
    comments = relationship("Comment", back_populates="article")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    body = Column(String, nullable=False)
    article_id = Column(Integer, ForeignKey("articles.id"))
    author_id = Column(Integer, ForeignKey("users.id"))
    article = relationship("Article", back_populates="comments")
    author = relationship("User", back_populates="comments")


registry = SchemaRegistry(
    [
        ResourceSchema(
            type="user",
            path="users",
            attributes=["name", "email"],
            relationships={
                "articles": {"target": "article", "many": True},
                "comments": {"target": "comment", "many": True},
            },
        ),
        ResourceSchema(
            type="article",
            path="articles",
            attributes=["title", "body"],
            relationships={
                "author": {"target": "user"},
                "comments": {"target": "comment", "many": True},
            },
        ),
        ResourceSchema(
            type="comment",
            path="comments",
            attributes=["body"],
            relationships={"article": {"target": "article"}, "author": {"target": "user"}},
        ),
    ]
)
registry.validate()

config = JSONAPIConfig.from_env()
serializer = JSONAPISerializer(registry, config=config, accessor=SQLAlchemyResourceAccessor())
articles_request = JSONAPIRequest(
    "article",
    registry,
    config=config,
    filter=SQLAlchemyFilterParser.for_model(Article),
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def load_options(model: Any, include: dict[str, Any]) -> list[Any]:
    """Translate an include tree into selectinload options."""
    options = []
    for name, subtree in include.items():
        prop = getattr(model, name)
        loader = selectinload(prop)
        target = prop.property.mapper.class_
        for option in load_options(target, subtree):
            loader = loader.options(option)
        options.append(loader)
    return options


def apply_filter(query: Any, filters: dict[str, Any]) -> Any:
    for field, condition in (filters or {}).items():
        if "." in field:
            # Relationship paths need joins; not shown here.
            continue
        column = getattr(Article, field)
        if isinstance(condition, dict):
            op, value = condition["op"], condition["val"]
            if op == "like":
                query = query.where(column.like(value))
            elif op == "in":
                query = query.where(column.in_(value))
            elif op in ("ne", "neq", "!="):
                query = query.where(column != value)
            else:
                query = query.where(column == value)
        else:
            query = query.where(column == condition)
    return query


async def seed_example_data(session: AsyncSession) -> None:
    """Insert example users, articles and comments if empty."""
    result = await session.execute(select(User.id).limit(1))
    if result.first() is not None:
        return
    jane = User(name="Jane Doe", email="jane.doe@example.com")
    john = User(name="John Smith", email="john.smith@example.com")
    article = Article(title="Designing APIs", body="Start with the documents.", author=jane)
    session.add_all(
        [
            jane,
            john,
            article,
            Article(title="Sparse fieldsets", body="Ask only for what you need.", author=john),
            Comment(body="Great read!", article=article, author=john),
        ]
    )
    await session.commit()


app = FastAPI(
    title="JSON:API Example",
    description="Articles, users and comments served as JSON:API documents.",
    version="0.1.0",
)
app.add_middleware(ContentNegotiationMiddleware)
install_exception_handlers(app)


@app.on_event("startup")
async def on_startup() -> None:
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    async with async_session() as session:
        await seed_example_data(session)


@app.get("/api/v1/articles")
async def list_articles(
    context: RequestContext = Depends(articles_request),
    session: AsyncSession = Depends(get_session),
) -> JSONAPIResponse:
    query = select(Article).options(*load_options(Article, context.include))
    query = apply_filter(query, context.filter)
    for direction, field in context.sort:
        column = getattr(Article, field)
        query = query.order_by(column.desc() if direction == "desc" else column.asc())
    if "limit" in context.page:
        query = query.limit(int(context.page["limit"]))
    if "offset" in context.page:
        query = query.offset(int(context.page["offset"]))
    articles = (await session.scalars(query)).all()
    return JSONAPIResponse(serializer.serialize("article", list(articles), context))


@app.get("/api/v1/articles/{article_id}")
async def get_article(
    article_id: int,
    context: RequestContext = Depends(articles_request),
    session: AsyncSession = Depends(get_session),
) -> JSONAPIResponse:
    query = select(Article).where(Article.id == article_id)
    query = query.options(*load_options(Article, context.include))
    article = (await session.scalars(query)).first()
    if article is None:
        return send_error(404, [{"detail": f"Article {article_id} not found"}])
    return JSONAPIResponse(serializer.serialize("article", article, context))


@app.post("/api/v1/articles", status_code=201)
async def create_article(
    context: RequestContext = Depends(articles_request),
    session: AsyncSession = Depends(get_session),
) -> JSONAPIResponse:
    params = context.params or {}
    article = Article(
        title=params.get("title"),
        body=params.get("body"),
        author_id=params.get("author_id"),
    )
    session.add(article)
    await session.flush()
    return JSONAPIResponse(serializer.serialize("article", article, context), status_code=201)
