import uvicorn
import argparse
import os
from swap_pricer.config import settings

# Command line is as follows:
# python run.py --entity "Rates Desk"

if __name__ == "__main__":

    parser = argparse.ArgumentParser(description='Start the SwapPricer application.')

    parser.add_argument('--entity', default='SwapPricer')
    parser.add_argument('--port', type=int, default=settings.API_PORT)
    args = parser.parse_args()

    # Store arguments in environment variables for access in the app
    os.environ['MY_ENTITY'] = args.entity

    uvicorn.run(
        "swap_pricer.main:app",
        host="0.0.0.0",
        port=args.port,
        reload=settings.DEBUG
    )
