"""CRUD operations for chat sessions and messages using FastCRUD."""

from fastcrud import FastCRUD

from .models import ChatSession, Message

chat_session_crud: FastCRUD = FastCRUD(ChatSession)
message_crud: FastCRUD = FastCRUD(Message)
