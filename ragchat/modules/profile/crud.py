"""CRUD operations for profile entities using FastCRUD."""

from fastcrud import FastCRUD

from .models import Profile

profile_crud: FastCRUD = FastCRUD(Profile)
