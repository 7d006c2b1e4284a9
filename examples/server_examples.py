import asyncio


class TestServers:
    def test_basic_handler(self):
        async def handler(request):
            await asyncio.sleep(0.1)
            return "Hello, World!"

        # snippet:ignore:start
        assert asyncio.run(handler(None)) == "Hello, World!"
        # snippet:ignore:end

    def test_handler_error(self):
        async def handler(request):
            await asyncio.sleep(0.1)
            raise ValueError("Oops!")

        try:
            asyncio.run(handler(None))
        except ValueError as error:
            assert str(error) == "Oops!"
