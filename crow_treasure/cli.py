"""Terminal front-end — renders each screen as text and maps commands to Session triggers."""

from __future__ import annotations

import asyncio
import re
import textwrap
from datetime import datetime
from typing import Callable

from crow_treasure.models import EMOTIONS, Treasure
from crow_treasure.session import Screen, Session

DELETE_CONFIRM = "确定要让风带走这段记忆吗？它将无法被找回。"
EMPTY_CHEST = "箱子里空空如也，像是一个没有梦境的白昼。"

_EMOTION_CMD = re.compile(r"/e\s*(\d+)")

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def render_card(treasure: Treasure) -> str:
    created = datetime.fromtimestamp(treasure.created_at / 1000).strftime("%Y-%m-%d")
    lines = [
        f"【{treasure.name}】  {treasure.type.value}  {treasure.color}",
    ]
    if treasure.emotion:
        lines.append(f"情绪: {treasure.emotion}")
    lines += [
        "",
        textwrap.fill(treasure.description, width=40),
        "",
        f"乌鸦: {treasure.crow_commentary}",
        "",
        f"「{treasure.content}」",
        created,
    ]
    return "\n".join(lines)


def render_emotions(selected: str | None) -> str:
    parts = []
    for i, emotion in enumerate(EMOTIONS, start=1):
        mark = "*" if emotion == selected else " "
        parts.append(f"{i}.{mark}{emotion}")
    return "  ".join(parts)


class TerminalApp:
    """Interactive loop over a Session.

    ``read`` and ``write`` default to input/print; tests pass scripted ones.
    ``read`` raising EOFError ends the loop.
    """

    def __init__(
        self,
        session: Session,
        read: Reader = input,
        write: Writer = print,
    ) -> None:
        self._session = session
        self._read = read
        self._write = write

    async def _ask(self, prompt: str) -> str:
        return await asyncio.to_thread(self._read, prompt)

    async def run(self) -> None:
        handlers = {
            Screen.HOME: self._home,
            Screen.INPUT: self._input,
            Screen.REVEAL: self._card,
            Screen.CHEST: self._chest,
            Screen.RETRIEVED: self._card,
        }
        try:
            while True:
                if await handlers[self._session.screen]() is False:
                    return
        except EOFError:
            return

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    async def _home(self) -> bool:
        s = self._session
        self._write(f"\nCrow's Treasure · 乌鸦的宝藏   (宝箱: {len(s.treasures)})")
        cmd = (await self._ask("[1] 记录思绪  [2] 打开宝箱  [q] 离开 > ")).strip().lower()
        if cmd == "q":
            return False
        if cmd == "1":
            s.record_thought()
        elif cmd == "2":
            s.open_chest()
        return True

    async def _input(self) -> bool:
        s = self._session
        self._write("\n书写卷轴 — 这份思绪的味道是...")
        self._write(render_emotions(s.emotion))
        line = await self._ask("输入思绪 (/e 数字 选择情绪, /b 返回) > ")
        stripped = line.strip()
        emotion_cmd = _EMOTION_CMD.fullmatch(stripped)
        if stripped == "/b":
            s.back()
        elif emotion_cmd:
            self._toggle_emotion(emotion_cmd.group(1))
        else:
            s.set_input(line)
            if s.input_text.strip():
                self._write("乌鸦正在铸造你的宝藏...")
            await s.submit()
        return True

    def _toggle_emotion(self, arg: str) -> None:
        if not arg.isdigit() or not 1 <= int(arg) <= len(EMOTIONS):
            self._write(f"请输入 1-{len(EMOTIONS)}")
            return
        self._session.select_emotion(EMOTIONS[int(arg) - 1])

    async def _chest(self) -> bool:
        s = self._session
        count = len(s.treasures)
        self._write(f"\n宝箱 — 共 {count} 件珍藏")
        if count == 0:
            self._write(EMPTY_CHEST)
            cmd = (await self._ask("[n] 去创造  [b] 返回 > ")).strip().lower()
            if cmd == "n":
                s.record_thought()
            elif cmd == "b":
                s.back()
            return True

        cmd = (await self._ask("[d] 探寻  [b] 返回 > ")).strip().lower()
        if cmd == "b":
            s.back()
        elif cmd == "d":
            task = s.start_draw()
            if task is not None:
                self._write("法阵亮起...")
                await task
        return True

    async def _card(self) -> bool:
        s = self._session
        if s.current is None:
            s.close()
            return True
        title = "宝藏显现" if s.screen is Screen.REVEAL else "RETRIEVED"
        self._write(f"\n{title}\n")
        self._write(render_card(s.current))
        cmd = (await self._ask("[c] 收起  [d] 放飞 > ")).strip().lower()
        if cmd == "d":
            answer = (await self._ask(f"{DELETE_CONFIRM} [y/N] > ")).strip().lower()
            if answer == "y":
                s.delete_current()
        elif cmd == "c":
            s.close()
        return True
