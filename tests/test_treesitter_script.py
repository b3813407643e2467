"""Tests for the tree-sitter script extractor."""

from codebrev.indexer.outline import Outline
from codebrev.indexer.treesitter_script import TreeSitterScriptExtractor, strip_annotation, unquote

TS_SOURCE = '''import { Base } from "./base";
import lodash from "lodash";

export interface Shape {
  label?: string;
  area(): number;
}

export enum Color { Red, Green = "g" }

export class Circle extends Base implements Shape {
  radius: number;

  area(): number {
    return compute(this.radius);
  }
}

export function greet(name: string): string {
  return name.toUpperCase();
}

const DEFAULT_LABEL = "circle";
'''


def _extract(source: str, path: str, language: str = "typescript"):
    outline = Outline()
    record = outline.add_file(path, abs_path="/repo/" + path, language=language)
    TreeSitterScriptExtractor(language).extract_source(source, record, outline)
    return record, outline


def test_helpers():
    assert unquote('"./x"') == "./x"
    assert unquote("`tpl`") == "tpl"
    assert unquote("plain") == "plain"
    assert strip_annotation(":  Promise<User>") == "Promise<User>"


def test_imports_and_functions():
    record, outline = _extract(TS_SOURCE, "src/shapes.ts")
    functions = {f.name: f for f in record.functions}

    assert record.imports == ["./base", "lodash"]
    assert record.local_imports == ["./base"]
    assert functions["greet"].params == ["name: string"]
    assert functions["greet"].return_type == "string"
    assert functions["greet"].calls_to == ["toUpperCase"]
    assert record.exported_funcs == ["greet"]
    assert record.vars == ["DEFAULT_LABEL"]


def test_types():
    """Interfaces, enums and classes with their members."""
    record, outline = _extract(TS_SOURCE, "src/shapes.ts")

    shape = outline.get_type("Shape")
    assert shape.fields == ["label?: string"]
    assert shape.methods == ["area() -> number"]

    assert outline.get_type("Color").fields == ["Red", "Green"]

    circle = outline.get_type("Circle")
    assert circle.embedded_types == ["Base"]
    assert circle.implements == ["Shape"]
    assert circle.fields == ["radius: number"]
    assert circle.methods == ["area() -> number"]
    assert outline.function_calls["src/shapes.ts:Circle.area"] == ["compute"]

    assert record.exported_types == ["Shape", "Color", "Circle"]


def test_tsx_components_and_hooks():
    source = '''import { useState } from "react";

export const App = () => {
  const [n, setN] = useState(0);
  return <Layout><Nav.Item /><div /></Layout>;
};
'''
    record, _ = _extract(source, "src/App.tsx", language="tsx")

    assert record.annotations["hooks"] == ["useState"]
    assert record.annotations["jsx_components"] == ["Layout", "Nav.Item"]
    assert record.exported_funcs == ["App"]


def test_commonjs_require():
    source = 'const fs = require("fs");\nconst util = require("./util");\n'
    record, _ = _extract(source, "lib/index.js", language="javascript")

    assert record.imports == ["fs", "./util"]
    assert record.local_imports == ["./util"]
