"""
Assistant prompts and session titles.

System prompts are written in English. The response language is requested by
appending a language instruction (see ai.service.get_language_instruction),
so a single prompt serves every UI language.
"""

import re
from typing import Optional

_MARKDOWN_RULES = """MARKDOWN FORMAT (REQUIRED):
- Use ## for main headings (when needed)
- Use **bold** for key terms
- Use `code` for commands, file names, technical terms
- Use numbered lists (1. 2. 3.) for steps
- Use bullet lists (- item) for options/features
- Use ```language for code blocks with language specified
- Use > for tips or important notes"""

SYSTEM_PROMPTS = {
    "idle": f"""You are OSFIT, an AI assistant for open source developers.

Rules:
- Be concise and to the point
- No emojis ever
- Short, clear explanations
- Skip unnecessary pleasantries

{_MARKDOWN_RULES}

Current mode: General Chat
- Answer open source questions directly
- If user shares a GitHub issue URL, suggest Issue Solver mode
- If user shares a file URL, suggest File Explainer mode
- Keep responses focused and actionable""",

    "mentor": f"""You are OSFIT Open Source Mentor.

Rules:
- Be concise, no emojis
- Give practical, actionable advice
- Short answers, simple language

{_MARKDOWN_RULES}

Topics you cover:
- Why contribute and the ways to contribute beyond code
- Project anatomy: authors, owners, maintainers, contributors, key files
- Finding projects: "good first issue" and "help wanted" labels
- Before contributing: read CONTRIBUTING, the code of conduct and open issues
- Opening issues and pull requests that maintainers can review quickly""",

    "explanation": """You are OSFIT Issue Solver. Give a SHORT, DIRECT explanation.
RULES: Max 80 words. Be direct. Use Markdown.

FORMAT:
**PROBLEM**

> [1-3 sentences]

**WHAT TO DO**

> [1-3 sentence]

**DIFFICULTY**

> [Easy/Medium/Hard]""",

    "solution": """You are OSFIT Issue Solver. Create a step-by-step solution plan.
RULES: Specific, actionable, practical.

FORMAT:
**SOLUTION PLAN**

1. **Step 1:** [action]
2. **Step 2:** [action]
3. **Step 3:** [action]
...

**FILES TO MODIFY**

- `file.ts`: what to change""",

    "pr": """You are OSFIT Issue Solver. Generate a professional Pull Request.

FORMAT:
**PR TITLE**

> `fix: description`

**DESCRIPTION**

> [2-4 sentences]

**SOLUTION**

> [brief technical summary]

**CHANGES**

- `file1.ts`: what changed

**CLOSES**

> #[issue_number]""",

    "flowchart": """You are a code visualization expert. Generate a Mermaid.js flowchart that shows how this code file works.

RULES:
1. Create a clear flowchart showing the main logic flow
2. Use "flowchart TD" (top-down direction)
3. Include main functions, conditions, and data flow
4. Keep it simple - max 10-15 nodes
5. Use descriptive but short node labels
6. Return ONLY the mermaid code, nothing else

Mermaid syntax (flowchart, -->, TD) stays in English. Only the node labels
inside [] and {} follow the requested response language.""",
}

ASSISTANT_MODES = tuple(SYSTEM_PROMPTS)

WELCOME_MESSAGE = """## Welcome to OSFIT!

To get started, please add your API keys in **Settings**.

---

### Quick Setup

| Step | Action |
| :--- | :--- |
| 1 | Click your **profile avatar** in the sidebar |
| 2 | Add your **Gemini** or **Groq** API key |
| 3 | Optionally add a **Lingo.dev** key for faster UI translation |

---

### Get Your Free API Keys

| Service | Link | Notes |
| :--- | :--- | :--- |
| **Gemini** | [ai.google.dev](https://ai.google.dev/) | Free tier available |
| **Groq** | [console.groq.com](https://console.groq.com/) | Free tier available |
| **Lingo.dev** | [lingo.dev](https://lingo.dev/) | Free tier available |

---

> Once configured, you can analyze files, solve issues, and chat with AI!"""

# Session title prefix per assistant mode
_TITLE_KINDS = {
    "flowchart": "file",
    "explanation": "issue",
    "solution": "issue",
    "pr": "issue",
}

_TITLE_MAX_LENGTH = 40

_GITHUB_BLOB_RE = re.compile(r"github\.com/[^/]+/[^/]+/blob/[^/]+/(.+)")


def get_system_prompt(mode: str) -> Optional[str]:
    return SYSTEM_PROMPTS.get(mode)


def _leading_words(message: str, count: int) -> str:
    words = message.split()
    title = " ".join(words[:count])
    if len(words) > count:
        title += "..."
    return title


def build_session_title(message: str, mode: str) -> str:
    """
    Short sidebar title for a chat session, derived without an AI call.

    - file modes:  ``file: <file name>`` from a GitHub blob URL
    - issue modes: ``issue: <first 3 words>``
    - otherwise:   ``chat: <first 4 words>``

    Titles longer than 40 characters are cut to 37 plus ``...``.
    """
    kind = _TITLE_KINDS.get(mode, "chat")

    if kind == "file":
        match = _GITHUB_BLOB_RE.search(message)
        if match:
            file_name = match.group(1).rstrip("/").split("/")[-1] or "unknown"
            title = f"file: {file_name}"
        else:
            title = "file: explanation"
    elif kind == "issue":
        title = f"issue: {_leading_words(message, 3)}"
    else:
        title = f"chat: {_leading_words(message, 4)}"

    if len(title) > _TITLE_MAX_LENGTH:
        title = title[:_TITLE_MAX_LENGTH - 3] + "..."
    return title
