"""Shell integration scripts emitted by ``frecd --init``.

Each script records the working directory on every change and defines a
``z`` function that jumps to the best match.
"""

from __future__ import annotations

ZSH_INIT = r"""
__frecd_add_dir() {
    command frecd --add-dir "${PWD}"
}

autoload -Uz add-zsh-hook
add-zsh-hook chpwd __frecd_add_dir

frecd_cd() {
    [ "$#" -eq 0 ] && command frecd && return 0
    [[ "$@[(r)--help]" == "--help" ]] && command frecd --help && return 0
    local to="$(command frecd --dir "$@")"
    [ -z "${to}" ] && return 1
    cd "${to}"
}
alias z='frecd_cd'
"""

BASH_INIT = r"""
__frecd_add_dir() {
    if [[ "${__FRECD_LAST_PWD}" != "${PWD}" ]]; then
        command frecd --add-dir "${PWD}"
    fi
    __FRECD_LAST_PWD="${PWD}"
}

if [[ -z "${PROMPT_COMMAND}" ]]; then
    PROMPT_COMMAND="__frecd_add_dir;"
else
    PROMPT_COMMAND="$(read newVal <<<"$PROMPT_COMMAND"; echo "${newVal%;}; __frecd_add_dir;")"
fi

frecd_cd() {
    [ "$#" -eq 0 ] && command frecd && return 0
    local to="$(command frecd --dir "$@")"
    [ -z "${to}" ] && return 1
    cd "${to}"
}
alias z='frecd_cd'
"""

SHELL_SCRIPTS = {
    "zsh": ZSH_INIT,
    "bash": BASH_INIT,
}


def supported_shells() -> list[str]:
    return sorted(SHELL_SCRIPTS)


def init_script(shell: str) -> str | None:
    """Return the hook script for ``shell``, or ``None`` when unsupported."""
    return SHELL_SCRIPTS.get(shell.strip().lower())
