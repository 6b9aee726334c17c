#!/usr/bin/env python3
import logging
import os
import sys

import aws_cdk as cdk

from infrastructure.assembly import assemble, cdk_environment
from infrastructure.config import ConfigurationError
from infrastructure.graph import ResourceGraph, describe

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")

app = cdk.App()

# --- スタックの定義 ---
# DOMAIN / HOSTED_ZONE が無ければリソースを一つも作らずに終了する
try:
    stack = assemble(app, os.environ, env=cdk_environment(os.environ))
except ConfigurationError as e:
    logger.error("%s", e)
    sys.exit(1)

assembly = app.synth()

# 合成結果のリソース順序を出力 (leaves first)
template = assembly.get_stack_by_name(stack.stack_name).template
for line in describe(ResourceGraph.from_template(template)):
    logger.info("%s", line)
