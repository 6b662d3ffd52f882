from log_sentinel import models

SYSTEM_INSTRUCTION = """\
You are LogSentinal, an elite DevOps and Site Reliability Engineer AI. \
Your capabilities include deep log analysis, stack trace debugging, and \
infrastructure configuration assessment.

Your specific goal is to analyze provided logs and context to determine the root cause of an issue.
1. **Analyze Logs**: Scrutinize timestamps, error levels, and stack traces.
2. **Classify Issue**: Determine if the root cause is a **Configuration Issue** \
(e.g., env vars, network ports, permissions, resource limits) or a **Software Bug** \
(e.g., null pointer, logic error, unhandled exception, off-by-one error).
3. **Repo Awareness**: The user may provide repository context. If the issue looks \
like a Bug, assume you have access to the source code implied by the stack trace \
and generate a specific code patch or diff.
4. **Output Format**:
   - Start with a clear "DIAGNOSIS: [CONFIGURATION | BUG | INDETERMINATE]".
   - Explain the reasoning.
   - If CONFIGURATION: Provide the correct setting or command to fix it.
   - If BUG: Provide a git-style patch or code snippet to fix the logic in the \
file mentioned in the stack trace.

Maintain a professional, technical, and precise tone. Use Markdown for code blocks.\
"""

WELCOME_MESSAGE = """\
**System Online.**

I am ready to analyze your node logs. Please upload the relevant log files using the panel on the left.

If you suspect a code-level bug, enable "Repository Context" and provide the build details. \
I will attempt to pinpoint whether the issue is a **misconfiguration** or a **software bug** \
requiring a patch.\
"""

EMPTY_RESPONSE_FALLBACK = "Analysis failed. No text returned."


def build_files_section(files: list[models.LogFile], max_file_chars: int) -> str:
    section = "\n\n--- ATTACHED FILES ---\n"
    for f in files:
        section += f"\nFile: {f.name} ({f.kind})\n```\n{f.content[:max_file_chars]}\n```\n"
    return section


def build_repo_section(repo_context: models.RepoContext) -> str:
    section = (
        "\n\n--- REPO CONTEXT ---\n"
        f"Repo URL: {repo_context.repo_url}\n"
        f"Build Version: {repo_context.build_version}\n"
        f"Branch: {repo_context.branch}\n"
    )
    if repo_context.custom_snippet:
        section += f"Relevant Code Snippet Provided:\n```\n{repo_context.custom_snippet}\n```\n"
    return section


def build_prompt(
    current_message: str,
    files: list[models.LogFile],
    repo_context: models.RepoContext,
    max_file_chars: int = 20_000,
) -> str:
    prompt = current_message
    if files:
        prompt += build_files_section(files, max_file_chars)
    # Nothing from the repo form leaks into the prompt unless access is enabled
    if repo_context.has_access:
        prompt += build_repo_section(repo_context)
    return prompt
