import asyncio

from fogcrawl.narration import Announcer, clean_messages


def test_clean_messages_drops_blanks() -> None:
    assert clean_messages(["  One. ", "", None, "Two."]) == ["One.", "Two."]


def test_messages_are_delivered_in_order() -> None:
    spoken: list[str] = []

    async def speak(message: str) -> None:
        spoken.append(message)

    async def run() -> None:
        announcer = Announcer(speak, delay=0)
        assert announcer.announce_sequence(["First.", "", "Second."]) == 2
        announcer.announce("Third.")
        assert announcer.pending == 3
        assert await announcer.drain() == 3
        assert announcer.pending == 0

    asyncio.run(run())
    assert spoken == ["First.", "Second.", "Third."]


def test_concurrent_drains_do_not_interleave() -> None:
    spoken: list[str] = []

    async def speak(message: str) -> None:
        await asyncio.sleep(0)
        spoken.append(message)

    async def run() -> None:
        announcer = Announcer(speak, delay=0.001)
        announcer.announce_sequence([f"line {index}" for index in range(5)])
        first = asyncio.create_task(announcer.drain())
        await asyncio.sleep(0)
        announcer.announce_sequence(["late 1", "late 2"])
        second = asyncio.create_task(announcer.drain())
        delivered = await asyncio.gather(first, second)
        assert sum(delivered) == 7

    asyncio.run(run())
    assert spoken == [f"line {index}" for index in range(5)] + ["late 1", "late 2"]
