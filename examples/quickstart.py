"""Quickstart example for insightengine.

This example demonstrates the analysis pipeline end to end: rules match a
document, matches become insights, insights are validated and published as
diagnostics.

Note: Examples print error values for brevity. In production, log them and
surface them to the user through the editor's own channels.
"""

import asyncio
import tempfile
from pathlib import Path

from insightengine import (
    AnalysisEngine,
    DiagnosticFormatter,
    DiagnosticPort,
    Err,
    InMemoryDiagnosticCollection,
    KeywordRule,
    Ok,
    OutputFormat,
    RegexRule,
    RuleSetLoader,
    Severity,
    SynthesisMode,
    pattern_rule,
)

SOURCE = """\
import os
# TODO: remove debug flag
DEBUG = True  # FIXME
def handler(event):
    print(event)  # TODO
    print("done")
    return event
"""

# Example 1: Analyse a document
print("=" * 50)
print("Example 1: Analyse a Document")
print("=" * 50)

engine = AnalysisEngine(
    [
        RegexRule("todo-marker", r"\b(?P<tag>TODO|FIXME)\b", message="Unresolved {tag}"),
        KeywordRule(
            "debug-print",
            ["print"],
            message="{count} debug print(s) left in code",
            severity=Severity.HINT,
            synthesis=SynthesisMode.AGGREGATE,
        ),
    ]
)

report = engine.analyze("file:///handler.py", SOURCE).unwrap()
for insight in report.insights:
    print(f"{insight.id}: {insight.message} at {insight.primary_location}")
# Output:
# todo-marker/0: Unresolved TODO at 1:2-6
# todo-marker/1: Unresolved FIXME at 2:16-21
# todo-marker/2: Unresolved TODO at 4:20-24
# debug-print/0: 2 debug print(s) left in code at 4:4-9

# Example 2: A failing rule does not stop the others
print("\n" + "=" * 50)
print("Example 2: Partial Failure")
print("=" * 50)


@pattern_rule(severity="error")
def always_broken(document):
    raise RuntimeError("rule bug")


partial = AnalysisEngine([*engine.rules, always_broken])
report = partial.analyze("file:///handler.py", SOURCE).unwrap()
print(f"Insights: {len(report.insights)}, failed rules: {report.failed_rule_ids}")
# Output: Insights: 4, failed rules: ('always-broken',)

# Example 3: Publish diagnostics through the port
print("\n" + "=" * 50)
print("Example 3: Publish Diagnostics")
print("=" * 50)


async def publish() -> None:
    collection = InMemoryDiagnosticCollection()
    async with DiagnosticPort(engine, collection) as port:
        match await port.validate_document("file:///handler.py", SOURCE):
            case Ok():
                formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
                print(formatter.format_all(collection.get("file:///handler.py")))
            case Err(error=error):
                print(error.format())

        await port.clear_diagnostics("file:///handler.py")
        print(f"After clear: {collection.get('file:///handler.py')}")


asyncio.run(publish())
# Output:
# 1:2-6 warning[todo-marker/0]: Unresolved TODO
# 2:16-21 warning[todo-marker/1]: Unresolved FIXME
# 4:20-24 warning[todo-marker/2]: Unresolved TODO
# 4:4-9 hint[debug-print/0]: 2 debug print(s) left in code
# After clear: ()

# Example 4: Rules from a TOML file
print("\n" + "=" * 50)
print("Example 4: Rules from TOML")
print("=" * 50)

with tempfile.TemporaryDirectory() as rules_dir:
    Path(rules_dir, "python.toml").write_text(
        """
[[rule]]
id = "secret"
kind = "keywords"
keywords = ["password", "api_key"]
severity = "error"
message = "Possible credential: {capture}"
""",
        encoding="utf-8",
    )
    rules = RuleSetLoader(rules_dir).load("python.toml")
    result = AnalysisEngine(rules).analyze("file:///settings.py", 'password = "hunter2"\n')
    for insight in result.unwrap().insights:
        print(f"{insight.severity.name}: {insight.message}")
# Output: ERROR: Possible credential: password
