"""
Prompt templates for commit message generation.
"""


SYSTEM_PROMPT = """
You write concise, high-quality Git commit messages.
Rules:
- Use a single-line summary, ~72 chars max.
- Use Conventional Commits where it makes sense (feat, fix, refactor, docs, test, chore, ci, perf, style).
- Focus on WHAT and WHY, not on filenames.
- Explain WHY the changes might have been made (best-effort inference).
- Output only the commit summary, no explanations.
""".strip()


class PromptBuilder:
    """Builds the messages sent to the model."""

    def __init__(self, system_prompt: str = SYSTEM_PROMPT):
        self.system_prompt = system_prompt

    def build_commit_prompt(self, diff: str) -> str:
        """User prompt carrying the staged diff."""
        return f"Here is the staged diff:\n\n{diff.strip()}"
