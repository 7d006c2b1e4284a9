class TestGenerators:
    def test_countdown(self):
        def countdown(n):
            while n > 0:
                yield n
                n -= 1

        assert list(countdown(3)) == [3, 2, 1]
