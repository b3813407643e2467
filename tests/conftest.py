"""Pytest configuration and fixtures for codebrev tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from codebrev.indexer.models import GoModule
from codebrev.indexer.outline import Outline


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def make_project(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write a {relative path: content} mapping under the temp directory."""

    def _make(files: Dict[str, str]) -> Path:
        for rel_path, content in files.items():
            path = temp_dir / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return temp_dir

    return _make


@pytest.fixture
def go_outline() -> Outline:
    """Outline with a single root module "example.com/app"."""
    outline = Outline(root="/repo")
    outline.set_modules([GoModule(dir_abs="/repo", dir_rel=".", mod_path="example.com/app")])
    return outline


@pytest.fixture
def sample_go_code() -> str:
    """Go source exercising types, methods, routes and cross-package use."""
    return '''package api

import (
	"encoding/json"
	"net/http"

	"example.com/app/internal/store"
)

const MaxUsers = 100

var defaultTimeout = 30

type User struct {
	ID     int    `json:"id"`
	Name   string `json:"name,omitempty" query:"name"`
	Secret string `json:"-"`
	Email  string `json:",omitempty"`
	store.Base
}

type Repository interface {
	Find(id int) (*User, error)
	io.Closer
}

type Server struct {
	db *store.DB
}

func NewServer(db *store.DB, addr string) *Server {
	return &Server{db: db}
}

func (s *Server) Routes(r Router) {
	r.Get("/users", s.listUsers)
	r.Post("/users", s.createUser)
	r.Header.Get("X-Request-ID")
}

func (s *Server) listUsers(w http.ResponseWriter, req *http.Request) {
	users, err := s.db.All()
	if err != nil {
		writeError(w, err)
		return
	}
	json.NewEncoder(w).Encode(users)
	_ = store.Count()
}

func helper(u interface{}) {
	_ = u.(User)
}
'''


@pytest.fixture
def sample_ts_code() -> str:
    """TypeScript source exercising interfaces, classes, enums and exports."""
    return '''import { useState } from "react";
import {
  Button,
  Card,
} from "~/components/ui";
import type { User } from "./types";

export interface Props extends BaseProps {
  user: User;
  onSave?: (u: User) => void;
  count(): number;
}

export const API_BASE_URL = "/api";
const i = 0;

export function formatUser(user: User, prefix = ""): string {
  return prefix + user.name.trim();
}

export class UserService extends BaseService implements Loader {
  private cache: Map<string, User>;

  async load(id: string): Promise<User> {
    return fetchUser(id);
  }
}

export enum Role { Admin, Member = "member" }

type Point = { x: number; y: number };

type Id = string | number;

const loadAll = async (ids: string[]): Promise<User[]> => {
  return Promise.all(ids.map(fetchUser));
};

export { loadAll };
'''
