"""The ledger's SQL guarded update, run against a SQLite database."""

import threading

import pytest
from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, create_engine, select
from sqlalchemy.orm import Session

from marketplace.inventory.ledger import guarded_stock_update
from marketplace.inventory.record import SCHEMA_NAME


@pytest.fixture()
def stock_table(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'inventory.db'}", connect_args={"timeout": 30})
    metadata = MetaData()
    table = Table(
        SCHEMA_NAME,
        metadata,
        Column("product_id", String(50), primary_key=True),
        Column("stock_quantity", Integer, nullable=False),
        Column("updated_at", DateTime(timezone=True)),
    )
    metadata.create_all(engine)
    with engine.begin() as connection:
        connection.execute(table.insert().values(product_id="prod-001", stock_quantity=8))

    yield engine, table

    engine.dispose()


def stock_of(engine, table, product_id="prod-001"):
    with engine.connect() as connection:
        return connection.execute(select(table.c.stock_quantity).where(table.c.product_id == product_id)).scalar_one()


class TestGuardedStockUpdate:
    def test_decrement_within_stock(self, stock_table):
        engine, table = stock_table
        assert guarded_stock_update(Session(engine), table, "prod-001", -5)
        assert stock_of(engine, table) == 3

    def test_decrement_beyond_stock_matches_no_row(self, stock_table):
        engine, table = stock_table
        assert not guarded_stock_update(Session(engine), table, "prod-001", -9)
        assert stock_of(engine, table) == 8

    def test_second_of_two_competing_decrements_is_refused(self, stock_table):
        engine, table = stock_table
        first = guarded_stock_update(Session(engine), table, "prod-001", -5)
        second = guarded_stock_update(Session(engine), table, "prod-001", -5)
        assert [first, second] == [True, False]
        assert stock_of(engine, table) == 3

    def test_unknown_product_matches_no_row(self, stock_table):
        engine, table = stock_table
        assert not guarded_stock_update(Session(engine), table, "prod-404", -1)

    def test_increment_has_no_floor(self, stock_table):
        engine, table = stock_table
        assert guarded_stock_update(Session(engine), table, "prod-001", 4)
        assert stock_of(engine, table) == 12

    def test_threads_racing_for_one_product_never_oversell(self, stock_table):
        engine, table = stock_table
        contenders = 6
        barrier = threading.Barrier(contenders)
        outcomes = []

        def buy_three():
            barrier.wait()
            outcomes.append(guarded_stock_update(Session(engine), table, "prod-001", -3))

        threads = [threading.Thread(target=buy_three) for _ in range(contenders)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(outcomes) == contenders
        assert outcomes.count(True) == 2
        assert stock_of(engine, table) == 2
