import argparse
import json
import logging
import os
import sys

from JPt.CHA.CHABuilder import CHABuilder
from JPt.IR.Loader import IRFormatError, loadFile
from JPt.PTA.Analysis import Analysis


def dumpResult(analysis: Analysis, path: str):
    if(not os.path.exists(path)):
        os.makedirs(path)

    result = analysis.getResult()
    with open(os.path.join(path, "Point-To Set.json"), "w") as f:
        f.write(result.pointsToJson())

    with open(os.path.join(path, "CallGraph.json"), "w") as f:
        f.write(analysis.callgraph.to_json())

    with open(os.path.join(path, "Pointer Flow.json"), "w") as f:
        f.write(analysis.pointerFlow.to_json())

    with open(os.path.join(path, "Class Hierarchy.json"), "w") as f:
        f.write(analysis.hierarchy.to_json())


def main(argv=None):
    argparser = argparse.ArgumentParser(prog="JPt")
    argparser.add_argument("program",
        help="the JSON file describing the program to analyze."
    )
    argparser.add_argument("-o", "--output",
        required=True,
        help="The file path where output callgraph will be stored. The output format will be json."
    )
    argparser.add_argument("-e", "--entry",
        help="Signature of the entry method, like \"<Main: void main()>\". Defaults to the program's main method."
    )
    argparser.add_argument("--cha",
        action="store_true",
        default=False,
        help="Build the call graph by class hierarchy analysis instead of pointer analysis."
    )
    argparser.add_argument("-d", "--dump",
        help="Directory where point-to sets, pointer flow and class hierarchy will be dumped."
    )
    argparser.add_argument("--include",
        help="Specify a string, then output callgraph only contains callers that start with this string."
    )
    argparser.add_argument("-v", "--verbose",
        action="store_true",
        default=False,
        help="Show progress and debug logging."
    )

    args = argparser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        program = loadFile(args.program)
    except (OSError, IRFormatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    entry = None
    if(args.entry):
        entry = program.getMethod(args.entry)
        if(entry is None):
            print(f"Error: entry method {args.entry} not found.", file=sys.stderr)
            return 1

    if(args.cha):
        callgraph = CHABuilder(program, entry).build()
    else:
        print("Program is loaded, start Point-to Analysis...                ")
        analysis = Analysis(program, entry, verbose=args.verbose)
        callgraph = analysis.solve().getCallGraph()
        if(args.dump):
            dumpResult(analysis, args.dump)

    callgraph = callgraph.export()
    if(args.include):
        callgraph = {k: v for k, v in callgraph.items() if k.startswith(args.include)}
    with open(args.output, "w") as fp:
        json.dump(callgraph, fp, indent=4)

    print("All done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
