"""Shared fixtures: small C/C++ sources and project trees."""

import os
import textwrap

import pytest

C_SOURCE = textwrap.dedent(
    """\
    #include <stdio.h>

    /* Adds two numbers. */
    int add(int a, int b)
    {
        return a + b;
    }

    int classify(int x)
    {
        if (x > 0 && x < 10) {
            return 1;
        } else if (x < 0) {
            return -1;
        }
        for (int i = 0; i < x; i++) {
            x--;
        }
        return 0;
    }
    """
)

CPP_SOURCE = textwrap.dedent(
    """\
    namespace zoo {

    class Dog {
    public:
        void bark() const {
            auto twice = [](int n) { return n * 2; };
            twice(2);
        }
        int legs;
    };

    }  // namespace zoo

    int main() {
        zoo::Dog d;
        d.bark();
        return 0;
    }
    """
)

HEADER_SOURCE = textwrap.dedent(
    """\
    #pragma once

    int add(int a, int b);

    struct point {
        int x;
        int y;
    };
    """
)

BROKEN_SOURCE = "int main( { return 0; }\n"


@pytest.fixture
def c_source():
    return C_SOURCE.encode()


@pytest.fixture
def cpp_source():
    return CPP_SOURCE.encode()


@pytest.fixture
def project(tmp_path):
    """A small mixed C/C++ tree with one unsupported and one broken file."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "include").mkdir()
    (root / "src" / "math.c").write_text(C_SOURCE)
    (root / "src" / "zoo.cpp").write_text(CPP_SOURCE)
    (root / "include" / "point.h").write_text(HEADER_SOURCE)
    (root / "src" / "broken.c").write_text(BROKEN_SOURCE)
    (root / "README.md").write_text("# project\n")
    return root


@pytest.fixture
def clean_project(tmp_path):
    """A tree whose files all analyze successfully."""
    root = tmp_path / "clean"
    root.mkdir()
    (root / "math.c").write_text(C_SOURCE)
    (root / "zoo.cpp").write_text(CPP_SOURCE)
    return root


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep user and project config files and ARCHAEO_* variables out of tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(home)
    for key in list(os.environ):
        if key.startswith("ARCHAEO_"):
            monkeypatch.delenv(key)
