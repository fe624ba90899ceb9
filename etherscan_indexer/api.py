from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from . import config, db
from psycopg2.extras import RealDictCursor

app = FastAPI()

# Add CORS middleware to allow cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)

BLOCK_COLUMNS = "id, block_number, hash, parent_hash, miner, block_reward, gas_limit, gas_used, indexed_at"
TRANSACTION_COLUMNS = "transaction_index, hash, from_address, to_address, value, gas, gas_price, indexed_at"


def _block_json(row):
    # NUMERIC columns come back as Decimal; keep full precision as strings
    return {
        "id": row["id"],
        "block_number": row["block_number"],
        "hash": row["hash"],
        "parent_hash": row["parent_hash"],
        "miner": row["miner"],
        "block_reward": str(row["block_reward"]),
        "gas_limit": str(row["gas_limit"]),
        "gas_used": str(row["gas_used"]),
        "indexed_at": str(row["indexed_at"]),
    }


def _transaction_json(row):
    return {
        "transaction_index": row["transaction_index"],
        "hash": row["hash"],
        "from": row["from_address"],
        "to": row["to_address"],
        "value": str(row["value"]),
        "gas": str(row["gas"]),
        "gas_price": str(row["gas_price"]),
        "indexed_at": str(row["indexed_at"]),
    }


@app.get("/stats/overview")
def stats_overview():
    try:
        with db.get_db_cursor(config.CONNECTION_STRING, cursor_factory=RealDictCursor) as cur:
            cur.execute("""
                SELECT
                    (SELECT COUNT(*)::bigint FROM blocks) AS block_count,
                    (SELECT COUNT(*)::bigint FROM transactions) AS transaction_count,
                    (SELECT MAX(block_number) FROM blocks) AS latest_block_number
            """)
            row = cur.fetchone()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "block_count": int(row["block_count"]),
        "transaction_count": int(row["transaction_count"]),
        "latest_block_number": row["latest_block_number"],
    }


@app.get("/blocks/{block_number}")
def get_block(block_number: int):
    try:
        with db.get_db_cursor(config.CONNECTION_STRING, cursor_factory=RealDictCursor) as cur:
            cur.execute(f"SELECT {BLOCK_COLUMNS} FROM blocks WHERE block_number = %s", (block_number,))
            row = cur.fetchone()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    if row is None:
        raise HTTPException(status_code=404, detail=f"Block {block_number} not indexed")
    return _block_json(row)


@app.get("/blocks/{block_number}/transactions")
def get_block_transactions(block_number: int):
    try:
        with db.get_db_cursor(config.CONNECTION_STRING, cursor_factory=RealDictCursor) as cur:
            cur.execute("SELECT id FROM blocks WHERE block_number = %s", (block_number,))
            block_row = cur.fetchone()
            if block_row is None:
                rows = None
            else:
                cur.execute(
                    f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE block_id = %s ORDER BY transaction_index",
                    (block_row["id"],),
                )
                rows = cur.fetchall()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    if rows is None:
        raise HTTPException(status_code=404, detail=f"Block {block_number} not indexed")
    return {
        "block_number": block_number,
        "transactions": [_transaction_json(r) for r in rows],
    }
