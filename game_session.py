from typing import Dict, Any, List


class GameSession:
    def __init__(self, game=None):
        self.game = game
        self.events: List[Dict[str, Any]] = []

    def emit(self, event: Dict[str, Any]):
        self.events.append(event)

    def drain(self) -> List[Dict[str, Any]]:
        evs, self.events = self.events, []
        return evs

    async def start(self) -> List[Dict[str, Any]]:
        self.events = []
        await self.game.start()
        await self.game.queue.wait_idle()
        return self.drain()

    async def step(self, token: str) -> Dict[str, Any]:
        self.events = []
        result = await self.game.submit(token)
        # INVALID only queues its error line; let it land before replying.
        await self.game.queue.wait_idle()
        return {"result": result.value, "events": self.drain()}

    async def restart(self) -> List[Dict[str, Any]]:
        self.events = []
        await self.game.restart()
        return self.drain()

    @property
    def accepting(self) -> bool:
        return self.game.gate.accepting

    def snapshot(self) -> Dict[str, Any]:
        state = self.game.state
        return {
            "location": state.location.value,
            "status": state.status,
            "flags": {name: state.flags.get(name) for name in state.flags.names()},
            "inventory": [i.value for i in state.inventory],
            "choices": self.game.registry.as_payload(),
            "terminal": state.terminal,
        }

