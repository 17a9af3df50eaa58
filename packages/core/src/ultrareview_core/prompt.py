"""Review prompt assembly.

The prompt is a pure function of its inputs: identical changes always
produce a byte-identical prompt.
"""

from __future__ import annotations

REVIEW_RUBRIC = """You are an expert code reviewer. Please perform a thorough and comprehensive review of this Pull Request.

Your review should cover:

1. **Code Quality & Best Practices**
   - Design patterns and architecture
   - Code organization and structure
   - Naming conventions and readability
   - DRY principle adherence
   - SOLID principles where applicable

2. **Potential Issues**
   - Bugs or logic errors
   - Edge cases not handled
   - Race conditions or concurrency issues
   - Memory leaks or performance problems
   - Security vulnerabilities

3. **Testing**
   - Test coverage adequacy
   - Missing test cases
   - Test quality and effectiveness

4. **Performance**
   - Algorithmic complexity
   - Database query efficiency
   - Resource usage (memory, CPU, network)
   - Caching opportunities

5. **Security**
   - Input validation
   - Authentication/authorization issues
   - SQL injection, XSS, or other vulnerabilities
   - Secrets or sensitive data exposure

6. **Maintainability**
   - Documentation quality
   - Code complexity
   - Technical debt introduced
   - Future extensibility

7. **Specific Suggestions**
   - Concrete code improvements
   - Alternative approaches
   - Refactoring opportunities

Please be thorough but constructive. Highlight both concerns and things done well.

---
"""

CLOSING_INSTRUCTION = "Please provide your comprehensive code review."


def build_review_prompt(
    diff: str,
    changed_files: str,
    commit_messages: str,
    additional_context: str = "",
) -> str:
    """Assemble the single user message sent to the model.

    Changed Files and Full Diff are always rendered. Recent Commit Messages
    and Additional Context are left out entirely when empty, so the model
    never sees a header with nothing under it.
    """
    sections = [
        REVIEW_RUBRIC,
        f"\n## Changed Files\n```\n{changed_files}\n```\n\n",
    ]

    if commit_messages:
        sections.append(f"## Recent Commit Messages\n```\n{commit_messages}\n```\n\n")

    sections.append(f"## Full Diff\n```diff\n{diff}\n```\n")

    if additional_context:
        sections.append(f"\n## Additional Context\n{additional_context}\n")

    sections.append(f"\n\n{CLOSING_INSTRUCTION}")
    return "".join(sections)
